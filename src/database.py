from mongoengine import connect, NotUniqueError

from config import DATABASE_URL, DATABASE_NAME
from constants.roles import BuiltinRole
from models.log import Log
from models.roles import Role
from tools.logger import logger


def init_db(**connect_kwargs):
    conn = connect(
        db=DATABASE_NAME,
        host=DATABASE_URL,
        alias="default",
        **connect_kwargs
    )

    conn.admin.command("ping")
    return conn


def seed_builtin_roles() -> None:
    """
    Makes sure the built-in roles exist. They are created without a stored permission
    set so that "Admin" keeps resolving to its legacy default until someone edits it.
    """
    for builtin in BuiltinRole:
        if Role.objects(role_name=builtin.value).first():
            continue
        try:
            Role(role_name=builtin.value, description="Built-in role", permissions=None, log=Log()).save()
            logger.info(f"Built-in role created: {builtin.value}")
        except NotUniqueError:
            # created concurrently by another worker
            pass
