# animal_records/services/firestore_service.py
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore


class FirestoreDocumentStore:
    """
    Firestore 문서 CRUD와 단일 등호 조건 조회만 제공하는 얇은 어댑터.
    반환되는 딕셔너리에는 문서 ID가 'id' 키로 포함됩니다.
    """

    def __init__(self, client=None):
        self.db = client or firestore.client()

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """새 문서를 자동 생성 ID로 저장하고 ID를 반환합니다."""
        doc_ref = self.db.collection(collection).document()
        doc_ref.set(data)
        logging.info(f"Firestore 저장 성공 (Collection: {collection}, Doc ID: {doc_ref.id})")
        return doc_ref.id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self.db.collection(collection).document(doc_id).get()
        if not doc.exists:
            return None
        data = doc.to_dict()
        data['id'] = doc.id
        return data

    def where_equal(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """field == value 조건 하나로 조회합니다. 정렬은 요청하지 않습니다 (복합 색인 불필요)."""
        docs = self.db.collection(collection).where(field, '==', value).stream()
        results = []
        for doc in docs:
            data = doc.to_dict()
            data['id'] = doc.id
            results.append(data)
        return results

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """전달된 필드만 병합합니다. 문서가 없으면 Firestore가 NotFound를 발생시킵니다."""
        self.db.collection(collection).document(doc_id).update(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self.db.collection(collection).document(doc_id).delete()
