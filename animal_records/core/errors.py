# animal_records/core/errors.py


class PersistenceError(RuntimeError):
    """
    백엔드(Firestore/Storage)가 쓰기·읽기 요청을 거부했거나 통신에 실패했을 때 발생합니다.
    재시도하지 않으며, 메시지는 그대로 클라이언트에 전달됩니다.
    """

    def __init__(self, message: str, operation: str = None, collection: str = None):
        super().__init__(message)
        self.operation = operation
        self.collection = collection


# 소유권 불일치와 문서 없음은 같은 메시지로 합쳐 정보 노출을 막습니다.
NOT_FOUND_OR_FORBIDDEN = "요청한 기록을 찾을 수 없거나 접근 권한이 없습니다."
