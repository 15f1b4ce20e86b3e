from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import insert, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gymschedule.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        Repository con operaciones CRUD por defecto sobre una tabla.
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Obtener un objeto por su ID.

        Args:
            db: Sesión de base de datos
            id: ID del objeto a obtener

        Returns:
            El objeto solicitado o None si no existe
        """
        return db.query(self.model).filter(self.model.id == id).first()

    def select(
        self, db: Session, *criteria: Any, order_by: Sequence[Any] = (), limit: Optional[int] = None
    ) -> List[ModelType]:
        """
        Consulta genérica: filtros como expresiones SQLAlchemy, orden y límite.

        Args:
            db: Sesión de base de datos
            criteria: Predicados a combinar con AND
            order_by: Columnas de ordenación
            limit: Número máximo de filas
        """
        query = db.query(self.model)
        if criteria:
            query = query.filter(*criteria)
        if order_by:
            query = query.order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        Crear un nuevo registro.

        Args:
            db: Sesión de base de datos
            obj_in: Datos del objeto a crear

        Returns:
            El objeto creado
        """
        # Usar model_dump() para preservar tipos date/time
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()

        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def insert_many(self, db: Session, rows: Iterable[Dict[str, Any]]) -> int:
        """
        Insertar un lote de filas en una sola sentencia y confirmarlo.

        Args:
            db: Sesión de base de datos
            rows: Diccionarios columna -> valor

        Returns:
            Número de filas insertadas

        Raises:
            SQLAlchemyError: Si el lote falla (tras hacer rollback del lote)
        """
        rows = list(rows)
        if not rows:
            return 0
        try:
            db.execute(insert(self.model), rows)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return len(rows)

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        Actualizar un registro.

        Args:
            db: Sesión de base de datos
            db_obj: Objeto existente a actualizar
            obj_in: Datos de actualización (solo los campos enviados)

        Returns:
            El objeto actualizado
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        try:
            db.add(db_obj)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(db_obj)
        return db_obj

    def update_where(self, db: Session, *criteria: Any, patch: Dict[str, Any]) -> int:
        """
        Actualización masiva de las filas que cumplen los predicados.

        Args:
            db: Sesión de base de datos
            criteria: Predicados a combinar con AND
            patch: Columnas a modificar

        Returns:
            Número de filas afectadas

        Raises:
            SQLAlchemyError: Si la actualización falla (tras hacer rollback)
        """
        stmt = update(self.model).where(*criteria).values(**patch).execution_options(synchronize_session="fetch")
        try:
            result = db.execute(stmt)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return result.rowcount

