import argparse
import asyncio
import json
import logging
import sys

from app.db import create_db_engine, create_tables
from app.exceptions import ValidationError
from app.services.ai.adjustment import AdjustmentProvider
from app.services.ai.providers.openai import OpenAIProvider
from app.services.estimate_engine import EstimateEngine
from app.settings import Settings

# 로그 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger("app.cli")


def run_serve_command(args, settings: Settings) -> None:
    import uvicorn

    port = args.port or settings.port
    logger.info(f"[CLI] Server running on {port}")
    uvicorn.run("app.main:app", host=args.host, port=port)


def run_init_db_command(args, settings: Settings) -> None:
    engine = create_db_engine(settings.database_url)
    create_tables(engine)
    logger.info("[CLI] Tables created (estimates, admin_tokens)")


def run_quote_command(args, settings: Settings) -> None:
    """저장/알림 없이 견적만 계산해 JSON으로 출력"""
    provider = None
    if args.with_ai:
        provider = OpenAIProvider(
            api_keys=settings.get_openai_keys(),
            model_name=settings.openai_model,
            timeout=settings.ai_timeout_seconds,
        )
    engine = EstimateEngine(AdjustmentProvider(provider, timeout_seconds=settings.ai_timeout_seconds))

    payload = {
        "workQty": args.work_qty,
        "cartonQty": args.carton_qty,
        "weightPerCarton": args.weight_per_carton,
        "workLocation": args.location,
        "productType": args.product_type,
        "workMethod": args.work_method,
        "urgency": args.urgency,
        "memo": args.memo,
        "contactName": args.contact_name,
        "contactPhone": args.contact_phone,
        "contactEmail": args.contact_email,
    }
    record = asyncio.run(engine.produce_estimate(payload))
    print(json.dumps(
        {
            "totalWeightKg": record.total_weight_kg,
            "baseFee": record.base_fee,
            "cartonFee": record.carton_fee,
            "transportFee": record.transport_fee,
            "ruleAdjRate": record.rule_adj_rate,
            "ruleFee": record.rule_fee,
            "aiAdjRate": record.ai_adj_rate,
            "totalAdjRate": record.total_adj_rate,
            "totalFee": record.total_fee,
            "leadTimeDays": record.lead_time_days,
            "aiComment": record.ai_comment,
            "notices": list(record.notices),
        },
        ensure_ascii=False,
        indent=2,
    ))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pleo Estimate CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="API 서버 실행")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=run_serve_command)

    init_db = subparsers.add_parser("init-db", help="테이블 생성")
    init_db.set_defaults(func=run_init_db_command)

    quote = subparsers.add_parser("quote", help="견적만 계산 (저장/알림 없음)")
    quote.add_argument("--work-qty", type=int, required=True)
    quote.add_argument("--carton-qty", type=int, required=True)
    quote.add_argument("--weight-per-carton", type=float, required=True)
    quote.add_argument("--location", default="인천항")
    quote.add_argument("--product-type", default=None)
    quote.add_argument("--work-method", default=None)
    quote.add_argument("--urgency", choices=["normal", "urgent", "night"], default="normal")
    quote.add_argument("--memo", default=None)
    quote.add_argument("--contact-name", default="CLI")
    quote.add_argument("--contact-phone", default="-")
    quote.add_argument("--contact-email", default="-")
    quote.add_argument("--with-ai", action="store_true", help="OpenAI 보정 포함")
    quote.set_defaults(func=run_quote_command)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = Settings()
    try:
        args.func(args, settings)
    except ValidationError as e:
        logger.error(f"[CLI] 입력값 오류: {e.message}")
        sys.exit(2)
    except Exception as e:
        logger.exception(f"[CLI] Critical error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
