import pytest
from sqlalchemy.exc import IntegrityError

from bom_service.app.core.exceptions import (
    AlreadyExistsError,
    ConstraintViolationError,
    translate_integrity_error,
)
from bom_service.app.core.security import SecurityUtils
from bom_service.app.utils.custom_fields import (
    decode_value,
    encode_value,
    infer_data_type,
)

class TestSecurityUtils:
    def test_password_round_trip(self):
        hashed = SecurityUtils.hash_password("strongpassword123")

        assert hashed != "strongpassword123"
        assert SecurityUtils.verify_password("strongpassword123", hashed)
        assert not SecurityUtils.verify_password("wrong", hashed)

    def test_missing_hash_never_verifies(self):
        assert not SecurityUtils.verify_password("anything", None)
        assert not SecurityUtils.verify_password("anything", "")

    def test_session_tokens_are_unique_and_hashed(self):
        first = SecurityUtils.generate_session_token()
        second = SecurityUtils.generate_session_token()

        assert first != second
        assert len(first) == 24
        digest = SecurityUtils.session_id_from_token(first)
        assert len(digest) == 64
        assert digest == SecurityUtils.session_id_from_token(first)


class TestCustomFieldValues:
    @pytest.mark.parametrize(
        "value,data_type",
        [
            (True, "boolean"),
            (5, "number"),
            (2.5, "number"),
            ({"a": 1}, "json"),
            ([1, 2], "json"),
            ("1W", "text"),
            (None, "text"),
        ],
    )
    def test_infer_data_type(self, value, data_type):
        assert infer_data_type(value) == data_type

    def test_decode_legacy_plain_text(self):
        assert decode_value("not json") == "not json"
        assert decode_value(encode_value({"a": [1, 2]})) == {"a": [1, 2]}


class TestIntegrityErrorTranslation:
    def _error(self, message: str) -> IntegrityError:
        return IntegrityError("INSERT", {}, Exception(message))

    def test_unique_violation(self):
        error = translate_integrity_error(
            self._error("UNIQUE constraint failed: manufacturers.name"),
            "Manufacturer exists",
        )

        assert isinstance(error, AlreadyExistsError)
        assert error.message == "Manufacturer exists"

    def test_foreign_key_violation(self):
        error = translate_integrity_error(
            self._error("FOREIGN KEY constraint failed"), "unused"
        )

        assert type(error) is ConstraintViolationError
        assert error.message == "Referenced record does not exist"

    def test_postgres_sqlstate(self):
        orig = Exception("duplicate key value violates unique constraint")
        orig.sqlstate = "23505"

        error = translate_integrity_error(IntegrityError("INSERT", {}, orig), "Exists")

        assert isinstance(error, AlreadyExistsError)
