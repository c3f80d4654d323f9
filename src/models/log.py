from datetime import datetime, timezone
from mongoengine import EmbeddedDocument, ObjectIdField, DateTimeField


def _utcnow():
    return datetime.now(timezone.utc)


class Log(EmbeddedDocument):
    """Who created and last touched a document."""
    creator_user_id = ObjectIdField()
    created_at = DateTimeField(default=_utcnow)
    updater_user_id = ObjectIdField()
    updated_at = DateTimeField()
