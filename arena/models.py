from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum

# ==================== ENUMS ====================

class UserRole(str, Enum):
    CHALLENGER = "CHALLENGER"   # participates in challenges
    MAINTAINER = "MAINTAINER"   # creates challenges and reviews submissions
    ADMIN = "ADMIN"

class ChallengeDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

class SubmissionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

class ResourceType(str, Enum):
    DOCUMENTATION = "documentation"
    VIDEO = "video"
    ARTICLE = "article"
    GITHUB = "github"

class ProfileVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"

class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB stores naive UTC; convert aware inputs so comparisons line up"""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ArenaModel(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

# ==================== USER MODELS ====================

class UserPreferences(ArenaModel):
    email_notifications: bool = True
    challenge_reminders: bool = True
    profile_visibility: ProfileVisibility = ProfileVisibility.PUBLIC
    theme: Theme = Theme.SYSTEM

class User(ArenaModel):
    id: str
    display_name: str
    email: str
    role: UserRole = UserRole.CHALLENGER
    total_points: int = 0
    joined_at: datetime
    profile_image_url: Optional[str] = None
    github_username: Optional[str] = None
    bio: Optional[str] = None
    preferences: Optional[UserPreferences] = None
    updated_at: Optional[datetime] = None

class UserCreate(ArenaModel):
    display_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    profile_image_url: Optional[str] = None
    github_username: Optional[str] = None
    bio: Optional[str] = None

class UserUpdate(ArenaModel):
    """Profile fields only - role and points have dedicated paths"""
    display_name: Optional[str] = Field(None, min_length=1)
    profile_image_url: Optional[str] = None
    github_username: Optional[str] = None
    bio: Optional[str] = None

class RoleUpdate(ArenaModel):
    role: UserRole

class PreferencesUpdate(ArenaModel):
    email_notifications: Optional[bool] = None
    challenge_reminders: Optional[bool] = None
    profile_visibility: Optional[ProfileVisibility] = None
    theme: Optional[Theme] = None

class UserFilters(ArenaModel):
    role: Optional[UserRole] = None

class UserStats(ArenaModel):
    total_users: int
    users_by_role: dict

# ==================== CHALLENGE MODELS ====================

class ChallengeResource(ArenaModel):
    title: str
    url: str
    type: ResourceType

class Challenge(ArenaModel):
    id: str
    title: str
    description: str
    requirements: List[str] = []
    start_date: datetime
    end_date: datetime
    difficulty: ChallengeDifficulty
    category: str
    resources: List[ChallengeResource] = []
    points: int
    active: bool
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class ChallengeCreate(ArenaModel):
    title: str = Field(..., min_length=1)
    description: str
    requirements: List[str] = []
    start_date: datetime
    end_date: datetime
    difficulty: ChallengeDifficulty
    category: str
    resources: List[ChallengeResource] = []
    points: int = Field(..., ge=0)
    active: bool = True

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @model_validator(mode='after')
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        return self

class ChallengeUpdate(ArenaModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    difficulty: Optional[ChallengeDifficulty] = None
    category: Optional[str] = None
    resources: Optional[List[ChallengeResource]] = None
    points: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

class ChallengeToggle(ArenaModel):
    active: bool

class ChallengeExtend(ArenaModel):
    days: int = Field(..., gt=0)

class ChallengeFilters(ArenaModel):
    category: Optional[str] = None
    difficulty: Optional[ChallengeDifficulty] = None
    active_only: bool = False
    upcoming: bool = False

class TimeRemaining(ArenaModel):
    days: int
    hours: int
    minutes: int

# ==================== SUBMISSION MODELS ====================

class Submission(ArenaModel):
    id: str
    challenge_id: str
    user_id: str
    repository_url: str
    language: str
    submitted_at: datetime
    status: SubmissionStatus
    feedback: Optional[str] = None
    reviewer_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    points: Optional[int] = None

class SubmissionCreate(ArenaModel):
    challenge_id: str = Field(..., min_length=1)
    repository_url: str = Field(..., min_length=1)
    language: str = Field(..., min_length=1)

class SubmissionReview(ArenaModel):
    status: SubmissionStatus
    feedback: str = ""

class SubmissionFilters(ArenaModel):
    challenge_id: Optional[str] = None
    user_id: Optional[str] = None
    status: Optional[SubmissionStatus] = None

class SubmissionStats(ArenaModel):
    total_submissions: int
    pending_submissions: int
    reviewed_submissions: int

class EnrichedSubmission(ArenaModel):
    submission: Submission
    challenge: Optional[Challenge] = None
    username: str

# ==================== LEADERBOARD MODELS ====================

class LeaderboardEntry(ArenaModel):
    rank: int
    user: User
    points: int
    submission_count: Optional[int] = None  # unknown for the all-time board

class ChallengeLeaderboardEntry(ArenaModel):
    rank: int
    user: User
    submitted_at: datetime

class LeaderboardResponse(ArenaModel):
    scope: str  # overall, weekly, monthly
    entries: List[LeaderboardEntry]
    limit: int

class ChallengeLeaderboardResponse(ArenaModel):
    scope: str = "challenge"
    challenge_id: str
    entries: List[ChallengeLeaderboardEntry]
    limit: int

# ==================== AUTH MODELS ====================

class TokenVerifyRequest(ArenaModel):
    id_token: str = Field(..., min_length=1)
