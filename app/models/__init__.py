"""SQLAlchemy database models."""
from dotenv import load_dotenv
from app.models.base import Base
from app.models.organization import AgentPersonality, Organization, SEOOpportunity
from app.models.press_release import GeneratedRelease, PRAngleOption, PRHeadlineVariant


load_dotenv()

__all__ = [
    "Base",
    "Organization",
    "AgentPersonality",
    "SEOOpportunity",
    "GeneratedRelease",
    "PRAngleOption",
    "PRHeadlineVariant",
]
