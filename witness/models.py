"""Dataclasses for the witness interrogation pipeline. No deps."""

from dataclasses import dataclass, field

REMOTE_API = "remote-api"
LOCAL_DAEMON = "local-daemon"

# Spellings found in stored preferences ("API or local").
REMOTE_API_ALIASES = frozenset({"remote-api", "remote", "api"})
LOCAL_DAEMON_ALIASES = frozenset({"local-daemon", "local", "ollama"})


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str              # "OpenAI", "Anthropic", "Ollama", ...
    kind: str              # "remote-api" or "local-daemon" (aliases allowed)
    chat_model: str = ""
    vision_model: str = ""
    auth_token: str | None = None
    endpoint_url: str | None = None

    @property
    def interrogation_model(self) -> str:
        """Model used for chat turns: the vision model, else the chat model."""
        return self.vision_model or self.chat_model


@dataclass
class Question:
    english: str
    czech: str = ""
    polish: str = ""
    topic: str = ""
    level: int = 0


@dataclass(frozen=True)
class ChatTurn:
    role: str      # "user" or "assistant"
    content: str

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Answer:
    id: str
    text: str      # verbatim decision reply, not coerced to YES/NO


@dataclass
class ReadinessStatus:
    provider: ProviderDescriptor
    ready: bool
    message: str


@dataclass
class Round:
    id: str
    question: Question
    answer_id: str = ""
    answer: str = ""
    eliminations: list[str] = field(default_factory=list)
