"""
Database Schemas for the Portfolio CMS

Each top-level Pydantic model maps to one MongoDB collection (lowercased class
name): portfolio, service, testimonial, contactsubmission, user, analytics.
Array items inside the portfolio carry an optional `id` that is stored as the
sub-document `_id`.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

SkillCategory = Literal[
    "Frontend",
    "Backend",
    "Database",
    "DevOps",
    "Mobile",
    "Tools",
    "Languages",
    "Frameworks",
    "Cloud",
    "Other",
]
Proficiency = Literal["Beginner", "Intermediate", "Advanced", "Expert"]
ProjectType = Literal["Web", "Mobile", "Design", "UI/UX"]

SKILL_CATEGORIES = get_args(SkillCategory)

SECTIONS = ("personalDetails", "skills", "projects", "experience", "education", "resume")
ARRAY_SECTIONS = ("skills", "projects", "experience", "education")

Email = Annotated[EmailStr, AfterValidator(str.lower)]
Url = Annotated[HttpUrl, AfterValidator(str)]


def _now():
    return datetime.now(timezone.utc)


class Doc(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class Item(Doc):
    id: Optional[str] = None


# =========
# Portfolio
# =========
class SocialLink(Item):
    platform: str = Field(min_length=1)
    url: Url
    icon: Optional[str] = None


class PersonalDetails(Doc):
    firstName: str = Field(min_length=1)
    lastName: str = Field(min_length=1)
    title: str = Field(min_length=1)
    email: Email
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    avatar: Optional[str] = None
    socialLinks: List[SocialLink] = []


class Skill(Item):
    category: SkillCategory
    name: str = Field(min_length=1)
    proficiency: Proficiency
    icon: Optional[str] = None


class Project(Item):
    title: str = Field(min_length=1)
    projectType: ProjectType = "Web"
    description: str = Field(min_length=1)
    techStack: List[str] = Field(min_length=1)
    githubUrl: Optional[str] = None
    liveUrl: Optional[str] = None
    images: List[str] = []
    featured: bool = False
    order: int = 0

    @field_validator("techStack")
    @classmethod
    def drop_blank_tech(cls, v: List[str]) -> List[str]:
        cleaned = [t.strip() for t in v if t and t.strip()]
        if not cleaned:
            raise ValueError("At least one technology is required")
        return cleaned


class Experience(Item):
    company: str = Field(min_length=1)
    role: str = Field(min_length=1)
    startDate: datetime
    endDate: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None
    responsibilities: List[str] = []
    location: Optional[str] = None
    order: int = 0


class Education(Item):
    institution: str = Field(min_length=1)
    degree: str = Field(min_length=1)
    field: Optional[str] = None
    startYear: int
    endYear: Optional[int] = None
    grade: Optional[str] = None
    description: Optional[str] = None
    order: int = 0


class Resume(Doc):
    fileUrl: Optional[str] = None
    lastUpdated: datetime = Field(default_factory=_now)


class Portfolio(Doc):
    personalDetails: PersonalDetails
    skills: List[Skill] = []
    projects: List[Project] = []
    experience: List[Experience] = []
    education: List[Education] = []
    resume: Resume = Field(default_factory=Resume)


SECTION_ITEM_MODELS = {
    "skills": Skill,
    "projects": Project,
    "experience": Experience,
    "education": Education,
}
SECTION_OBJECT_MODELS = {
    "personalDetails": PersonalDetails,
    "resume": Resume,
}


# =====================
# Independent content
# =====================
class Service(Doc):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    icon: Optional[str] = None
    order: int = 0
    isActive: bool = True


class Testimonial(Doc):
    name: str = Field(min_length=1)
    role: Optional[str] = None
    company: Optional[str] = None
    content: str = Field(min_length=1)
    avatar: Optional[str] = None
    rating: int = Field(default=5, ge=1, le=5)
    order: int = 0
    isActive: bool = True


class ReorderItem(BaseModel):
    id: str
    order: int


class ReorderRequest(BaseModel):
    items: List[ReorderItem]


class ContactSubmission(Doc):
    name: str = Field(min_length=1)
    email: Email
    subject: str = ""
    message: str = Field(min_length=1)


class AnalyticsEvent(Doc):
    type: Literal["visit", "download", "resume_view", "message"]
    sessionId: Optional[str] = None
    meta: Dict[str, Any] = {}


# ====
# Auth
# ====
class User(Doc):
    name: str = Field(min_length=1)
    email: Email
    password: str = Field(min_length=6)
    role: Literal["admin", "editor"] = "admin"


class RegisterRequest(Doc):
    name: str = Field(min_length=1)
    email: Email
    password: str = Field(min_length=6)


class LoginRequest(Doc):
    email: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str = Field(min_length=6)
