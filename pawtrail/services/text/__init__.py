"""Route title generation."""
from .title_service import OpenAITitleService, TemplateTitleService, TitleService

__all__ = ["TitleService", "OpenAITitleService", "TemplateTitleService"]
