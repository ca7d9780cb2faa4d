from creatorpulse.api.schemas.auth import (
    AuthResponse,
    ProfileUpdateRequest,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserEnvelope,
    UserResponse,
)
from creatorpulse.api.schemas.feedback import (
    FeedbackCreateRequest,
    FeedbackEnvelope,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackUpdateRequest,
)
from creatorpulse.api.schemas.meta import HealthResponse, MessageResponse
from creatorpulse.api.schemas.newsletters import (
    NewsletterEnvelope,
    NewsletterListResponse,
    NewsletterResponse,
    NewsletterSendResponse,
    NewsletterStatsResponse,
    NewsletterUpdateRequest,
)
from creatorpulse.api.schemas.sources import (
    ContentItemListResponse,
    ContentItemResponse,
    SourceCreateRequest,
    SourceEnvelope,
    SourceListResponse,
    SourceResponse,
    SourceUpdateRequest,
)
from creatorpulse.api.schemas.trends import TrendListResponse, TrendResponse
from creatorpulse.api.schemas.writing_samples import (
    WritingSampleCreateRequest,
    WritingSampleEnvelope,
    WritingSampleListResponse,
    WritingSampleResponse,
)

__all__ = [
    "AuthResponse",
    "ContentItemListResponse",
    "ContentItemResponse",
    "FeedbackCreateRequest",
    "FeedbackEnvelope",
    "FeedbackListResponse",
    "FeedbackResponse",
    "FeedbackUpdateRequest",
    "HealthResponse",
    "MessageResponse",
    "NewsletterEnvelope",
    "NewsletterListResponse",
    "NewsletterResponse",
    "NewsletterSendResponse",
    "NewsletterStatsResponse",
    "NewsletterUpdateRequest",
    "ProfileUpdateRequest",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
    "SourceCreateRequest",
    "SourceEnvelope",
    "SourceListResponse",
    "SourceResponse",
    "SourceUpdateRequest",
    "TrendListResponse",
    "TrendResponse",
    "UserEnvelope",
    "UserResponse",
    "WritingSampleCreateRequest",
    "WritingSampleEnvelope",
    "WritingSampleListResponse",
    "WritingSampleResponse",
]
