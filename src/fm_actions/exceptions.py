"""fm_actions の例外型定義"""

from __future__ import annotations


class FmActionsError(Exception):
    """fm_actions のエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"

    @property
    def message(self) -> str:
        return super().__str__()


class FmActionsErrorCodes:
    """FmActionsError のエラーコード定数。"""

    VALIDATION: str = "VALIDATION_ERROR"
    NOT_FOUND: str = "NOT_FOUND"
    HTTP_ERROR: str = "HTTP_ERROR"
    TRANSPORT_ERROR: str = "TRANSPORT_ERROR"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"


class ValidationError(FmActionsError):
    """入力検証エラー。ネットワーク呼び出しの前に発生する。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(FmActionsErrorCodes.VALIDATION, message, cause)


class EntityNotFoundError(FmActionsError):
    """名前解決エラー。"""

    def __init__(
        self,
        kind: str,
        name: str,
        detail: str = "",
        cause: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.name = name
        message = f"{kind} '{name}' not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(FmActionsErrorCodes.NOT_FOUND, message, cause)


class ApiError(FmActionsError):
    """API が 2xx 以外を返した場合のエラー。"""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            FmActionsErrorCodes.HTTP_ERROR,
            f"API request failed with status {status_code}: {body}",
        )
