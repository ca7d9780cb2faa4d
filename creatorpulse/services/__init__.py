from creatorpulse.services.auth_service import (
    AuthService,
    InvalidCredentialsError,
    PasswordTooLongError,
    UserAlreadyExistsError,
)
from creatorpulse.services.content_service import ContentItemRepository, ContentService
from creatorpulse.services.errors import ResourceNotFoundError, ServiceError
from creatorpulse.services.feedback_service import FeedbackService
from creatorpulse.services.newsletter_service import (
    NewsletterAlreadySentError,
    NewsletterGenerationError,
    NewsletterNotFoundError,
    NewsletterService,
)
from creatorpulse.services.source_service import SourceService
from creatorpulse.services.style_service import StyleExtractor
from creatorpulse.services.trend_service import TrendAnalysisError, TrendService
from creatorpulse.services.writing_sample_service import WritingSampleService

__all__ = [
    "AuthService",
    "ContentItemRepository",
    "ContentService",
    "FeedbackService",
    "InvalidCredentialsError",
    "NewsletterAlreadySentError",
    "NewsletterGenerationError",
    "NewsletterNotFoundError",
    "NewsletterService",
    "PasswordTooLongError",
    "ResourceNotFoundError",
    "ServiceError",
    "SourceService",
    "StyleExtractor",
    "TrendAnalysisError",
    "TrendService",
    "UserAlreadyExistsError",
    "WritingSampleService",
]
