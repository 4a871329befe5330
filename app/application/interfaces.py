from abc import ABC, abstractmethod
from pathlib import Path


class SpeechToTextInterface(ABC):
    """Contract for the speech-to-text capability"""

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    async def transcribe(self, audio_path: Path) -> str:
        """Return the plain-text transcript of the audio stored at ``audio_path``."""
        ...


class TextGenerationInterface(ABC):
    """Contract for the structured text generation capability"""

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    async def generate(self, *, system_prompt: str, user_prompt: str) -> str:
        """Return the model reply, constrained by ``system_prompt`` to a single JSON object."""
        ...
