from creatorpulse.db.models.content_item import ContentItem
from creatorpulse.db.models.feedback import Feedback, FeedbackRating
from creatorpulse.db.models.newsletter import Newsletter
from creatorpulse.db.models.source import Source, SourceType
from creatorpulse.db.models.trend import Trend
from creatorpulse.db.models.user import User
from creatorpulse.db.models.writing_sample import WritingSample

__all__ = [
    "ContentItem",
    "Feedback",
    "FeedbackRating",
    "Newsletter",
    "Source",
    "SourceType",
    "Trend",
    "User",
    "WritingSample",
]
