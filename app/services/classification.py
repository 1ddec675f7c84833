"""
자유 입력 텍스트(작업 위치, 제품 종류, 작업 방식, 메모)에서 요율 판단용 카테고리를 추정합니다.

카테고리마다 함수 하나씩 두어, 키워드 규칙을 한곳에서 테스트/교체할 수 있게 합니다.
"""
from __future__ import annotations

import re

AIRPORT_PATTERN = re.compile(r"공항|\bairport\b", re.IGNORECASE)
PORT_PATTERN = re.compile(r"인천|항|\bincheon\b|\bport\b", re.IGNORECASE)
NEW_PORT_PATTERN = re.compile(r"신항|\bnew\s*port\b", re.IGNORECASE)
PRIMARY_AREA_PATTERN = re.compile(r"인천|\bincheon\b", re.IGNORECASE)

FROZEN_PATTERN = re.compile(r"냉동|냉장|\bfrozen\b", re.IGNORECASE)
SACK_PATTERN = re.compile(r"포대|마대|분말|파우더|\b(?:sacks?|powder)\b", re.IGNORECASE)
BULKY_PATTERN = re.compile(r"기저귀|부피|대형|\b(?:diapers?|bulky)\b", re.IGNORECASE)
ALCOHOL_PATTERN = re.compile(r"주류|와인|맥주|소주|양주|위스키|유리|\b(?:alcohol|wines?|liquor|glass)\b", re.IGNORECASE)

SEWING_PATTERN = re.compile(r"박음질|재봉|미싱|\b(?:sewing|stitch(?:ing)?)\b", re.IGNORECASE)
WITNESS_PATTERN = re.compile(r"기타|입회|\b(?:witness|other)\b", re.IGNORECASE)

URGENT_MEMO_PATTERN = re.compile(r"야간|긴급|급히|\b(?:night|urgent|rush)\b", re.IGNORECASE)


def _matches(pattern: re.Pattern[str], *texts: str | None) -> bool:
    return any(text and pattern.search(text) for text in texts)


def is_airport(location: str | None) -> bool:
    return _matches(AIRPORT_PATTERN, location)


def is_port(location: str | None) -> bool:
    """인천/항구 계열 위치 (공항 여부와 무관하게 매칭될 수 있음)"""
    return _matches(PORT_PATTERN, location)


def is_new_port(location: str | None) -> bool:
    return _matches(NEW_PORT_PATTERN, location)


def is_primary_area(location: str | None) -> bool:
    """기본 작업권역(인천). 그 외 지역은 추가 운송비 안내 대상"""
    return _matches(PRIMARY_AREA_PATTERN, location)


def is_frozen(product_type: str | None, location: str | None, memo: str | None) -> bool:
    return _matches(FROZEN_PATTERN, product_type, location, memo)


def is_sack(product_type: str | None, memo: str | None) -> bool:
    return _matches(SACK_PATTERN, product_type, memo)


def is_bulky(product_type: str | None) -> bool:
    return _matches(BULKY_PATTERN, product_type)


def is_alcohol(product_type: str | None) -> bool:
    return _matches(ALCOHOL_PATTERN, product_type)


def is_sewing_method(work_method: str | None) -> bool:
    return _matches(SEWING_PATTERN, work_method)


def is_witness_method(work_method: str | None) -> bool:
    return _matches(WITNESS_PATTERN, work_method)


def has_urgent_memo(memo: str | None) -> bool:
    return _matches(URGENT_MEMO_PATTERN, memo)
