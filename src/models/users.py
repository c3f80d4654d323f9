from mongoengine import Document, StringField, BooleanField, EmbeddedDocumentField

from .log import Log


class User(Document):
    ext_id = StringField(required=True, unique=True)
    first_name = StringField()
    last_name = StringField()
    email = StringField()
    role_name = StringField()
    is_active = BooleanField(default=True)
    log = EmbeddedDocumentField(Log)

    meta = {"collection": "users"}
