from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional


class AIProvider(ABC):
    name: str = "base"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """
        Whether credentials are present and the provider can be called.
        """

    @abstractmethod
    async def generate_json(self, prompt: str, model: Optional[str] = None) -> Dict[str, Any] | List[Any]:
        """
        Generates structured JSON response.
        Raises AIError when the provider cannot produce a parsable answer.
        """
        pass
