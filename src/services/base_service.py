from datetime import datetime, timezone
from typing import TypeVar, Generic, Type, Optional, Any, Dict
from pydantic import BaseModel, ValidationError
from mongoengine import Document, DoesNotExist, ValidationError as MongoValidationError, NotUniqueError
from bson import ObjectId

from models.log import Log
from tools.logger import logger
from tools.utils import serialize_document
from fastapi import HTTPException

ModelType = TypeVar("ModelType", bound=Document)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
ReadSchemaType = TypeVar("ReadSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseService(Generic[ModelType, CreateSchemaType, ReadSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], read_schema: Type[ReadSchemaType]):
        """
        Initializes the base service with the model and read schema.
        :param model: MongoEngine model
        :param read_schema: Pydantic schema for output serialization
        """
        self.model = model
        self.read_schema = read_schema

    @staticmethod
    def _serialize_document(document) -> dict:
        return serialize_document(document)

    def _to_read(self, document) -> ReadSchemaType:
        return self.read_schema.model_validate(self._serialize_document(document))

    def _get_document(self, id: str) -> ModelType:
        if not ObjectId.is_valid(id):
            logger.error(f"Invalid ID format: {id}")
            raise HTTPException(status_code=400, detail="Invalid ID format")
        try:
            return self.model.objects.get(id=id)
        except DoesNotExist as e:
            logger.error(f"Resource not found: id={id} - {e}")
            raise HTTPException(status_code=404, detail="Resource not found")

    def get_by_id(self, id: str) -> ReadSchemaType:
        """
        Gets a resource by its ID and serializes it with the read_schema.
        :param id: Resource ID
        :return: Serialized resource
        """
        return self._to_read(self._get_document(id))

    def create(self, obj_in: CreateSchemaType | Dict[str, Any], user_id: Optional[str] = None) -> ReadSchemaType:
        """
        Creates a new resource from the input schema and serializes it.
        If user_id is provided, it is recorded as the creator in the log.
        :param obj_in: Input schema or dictionary
        :param user_id: User ID (optional)
        :return: Created and serialized resource
        """
        obj_data = obj_in.model_dump() if isinstance(obj_in, BaseModel) else dict(obj_in)
        try:
            if "log" in self.model._fields:
                obj_data["log"] = Log(creator_user_id=ObjectId(user_id) if user_id else None)

            db_obj = self.model(**obj_data)
            db_obj.save()
            return self._to_read(db_obj)

        except NotUniqueError as e:
            logger.error(f"Duplicate key error in create: {e}")
            raise HTTPException(status_code=409, detail="Resource already exists")
        except (ValidationError, MongoValidationError) as e:
            logger.error(f"Validation error in create: {e}")
            raise HTTPException(status_code=400, detail=f"Validation error: {str(e)}")

    def update(self, id: str, obj_in: UpdateSchemaType | Dict[str, Any], user_id: Optional[str] = None) -> ReadSchemaType:
        """
        Updates a resource by its ID and serializes it.
        If user_id is provided, the log keeps the creator and records the updater.
        :param id: Resource ID
        :param obj_in: Update schema or dictionary
        :param user_id: User ID (optional)
        :return: Updated and serialized resource
        """
        db_obj = self._get_document(id)
        update_data = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)

        if "log" in self.model._fields:
            update_data["set__log__updated_at"] = datetime.now(timezone.utc)
            if user_id is not None:
                update_data["set__log__updater_user_id"] = ObjectId(user_id)

        try:
            db_obj.modify(**update_data)
            db_obj.reload()
            return self._to_read(db_obj)
        except NotUniqueError as e:
            logger.error(f"Duplicate key error in update: {e}")
            raise HTTPException(status_code=409, detail="Resource already exists")
        except (ValidationError, MongoValidationError) as e:
            logger.error(f"Validation error in update: {e}")
            raise HTTPException(status_code=400, detail=f"Validation error: {str(e)}")

    def delete(self, id: str) -> None:
        """
        Deletes a resource by its ID.
        :param id: Resource ID
        """
        db_obj = self._get_document(id)
        db_obj.delete()
