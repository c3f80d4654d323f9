from mongoengine import Document, StringField, DictField, EmbeddedDocumentField

from .log import Log


class Role(Document):
    """
    A panel role. ``permissions`` is None when nothing was ever stored for the role,
    which is not the same as an explicitly empty set.
    """
    role_name = StringField(required=True, unique=True, max_length=100)
    description = StringField()
    permissions = DictField(default=None, null=True)
    log = EmbeddedDocumentField(Log)

    meta = {"collection": "roles"}
