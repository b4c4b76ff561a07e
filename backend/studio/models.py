from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal


class Capability(str, Enum):
    PREVIEW_CODE = "preview_code"
    IMAGE_GEN = "image_gen"
    AUDIO_GEN = "audio_gen"
    VIDEO_GEN = "video_gen"
    SEARCH_GROUNDING = "search_grounding"
    LIVE_VOICE = "live_voice"


class KnowledgeEntry(BaseModel):
    id: str
    content: str
    source: str = ""


class Bot(BaseModel):
    id: str
    name: str
    description: str = ""
    avatar: str = ""
    status: Literal["active", "draft", "archived"] = "draft"
    system_instruction: str = ""
    knowledge_base: List[KnowledgeEntry] = Field(default_factory=list)
    usage_count: int = 0
    last_active: Optional[str] = None
    temperature: float = 0.7
    top_p: float = 0.95
    top_k: int = 40
    capabilities: List[Capability] = Field(
        default_factory=lambda: [Capability.PREVIEW_CODE]
    )
    contact_email: Optional[str] = None
    website: Optional[str] = None
    other_info: Optional[str] = None

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    text: str
    timestamp: str
    type: Literal["text", "image"] = "text"
    media_url: Optional[str] = None


# --- request/response models ---


class CreateBotRequest(BaseModel):
    name: str
    description: str = ""
    system_instruction: str = ""
    knowledge_base: List[KnowledgeEntry] = Field(default_factory=list)
    temperature: float = 0.7
    top_p: float = 0.95
    top_k: int = 40
    capabilities: List[Capability] = Field(
        default_factory=lambda: [Capability.PREVIEW_CODE]
    )
    contact_email: Optional[str] = None
    website: Optional[str] = None


class ExtractRequest(BaseModel):
    text: str


class FileSetResponse(BaseModel):
    project_id: str
    files: Dict[str, str]
    active_file: Optional[str] = None
    preview_url: Optional[str] = None


class EditFileRequest(BaseModel):
    content: str


class FileContentResponse(BaseModel):
    name: str
    content: str
    can_undo: bool = False
    can_redo: bool = False


class SearchRequest(BaseModel):
    query: str
    file: Optional[str] = None
    position: int = 0
    direction: Literal["next", "prev"] = "next"


class SearchResponse(BaseModel):
    found: bool
    start: Optional[int] = None
    end: Optional[int] = None


class ReplaceAllRequest(BaseModel):
    query: str
    replacement: str = ""
    file: Optional[str] = None


class ChatRequest(BaseModel):
    message: str


class ApplyArtifactsRequest(BaseModel):
    text: str
    replace: bool = True


class ImageRequest(BaseModel):
    prompt: str
