from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from app.core.exceptions import ConflictError, NotFoundError
from app.models.document_type import DocumentType


class DocumentTypeService:
    def __init__(self, db: Session):
        self.db = db

    def get_active(self) -> List[DocumentType]:
        return (
            self.db.query(DocumentType)
            .filter(DocumentType.is_active.is_(True))
            .order_by(DocumentType.name)
            .all()
        )

    def get_by_id(self, document_type_id: str) -> Optional[DocumentType]:
        return self.db.query(DocumentType).filter(DocumentType.id == document_type_id).first()

    def get_price_map(self, document_type_ids) -> Dict[str, DocumentType]:
        """Active document types keyed by id, for pricing lookups."""
        ids = {i for i in document_type_ids if i}
        if not ids:
            return {}
        rows = self.db.query(DocumentType).filter(
            DocumentType.id.in_(ids),
            DocumentType.is_active.is_(True),
        ).all()
        return {row.id: row for row in rows}

    def create(self, data: Dict) -> DocumentType:
        if self.get_by_id(data["id"]):
            raise ConflictError(f"Document type '{data['id']}' already exists")
        document_type = DocumentType(**data)
        self.db.add(document_type)
        self.db.commit()
        self.db.refresh(document_type)
        return document_type

    def update(self, document_type_id: str, data: Dict) -> DocumentType:
        document_type = self.get_by_id(document_type_id)
        if not document_type:
            raise NotFoundError("Document type not found")
        for key, value in data.items():
            if value is not None:
                setattr(document_type, key, value)
        self.db.commit()
        self.db.refresh(document_type)
        return document_type
