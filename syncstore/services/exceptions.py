# syncstore/services/exceptions.py

# --- Store Context Exceptions ---
class StoreClosedError(Exception):
    """닫힌 스토어 핸들로 호출했을 때"""
    pass

class WrongContextError(Exception):
    """스토어를 연 스레드가 아닌 다른 스레드에서 호출했을 때"""
    pass

class NotInTransactionError(Exception):
    """쓰기 트랜잭션 밖에서 변경 작업을 시도했을 때"""
    pass

# --- Argument/Validation Exceptions ---
class InvalidArgumentError(ValueError):
    """필수 인자(클래스, 타입 이름, 객체)가 None이거나 잘못된 타입일 때"""
    pass

class InvalidScopeError(Exception):
    """권한을 계산할 범위(scope)가 현재 스키마에서 유효하지 않을 때"""
    pass

class UnknownTypeError(InvalidScopeError):
    """요청한 타입이 현재 스키마에 존재하지 않을 때"""
    pass

class InvalidPrincipalError(Exception):
    """사용자(principal) 식별자가 비어 있거나 형식이 잘못되었을 때"""
    pass

# --- Object Exceptions ---
class UnmanagedObjectError(Exception):
    """스토어에 저장되지 않은(관리되지 않는) 객체를 전달했을 때"""
    pass

class CrossStoreReferenceError(Exception):
    """다른 스토어 인스턴스에 속한 객체를 전달했을 때"""
    pass
