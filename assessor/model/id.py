from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KeyLength: t.Final = 22


class ShortUUIDKey(str):
    """
    A shortuuid carrying a type prefix, e.g. `atmp$Vf3kQ...`

    Only the 22-character key part is persisted (see
    `assessor.storage.type.ShortUUIDKeyType`); the prefix is restored from the
    subclass when rows are loaded.
    """

    prefix: t.ClassVar[str]
    separator: t.ClassVar[str]

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.Len(4, 4)], separator: t.Annotated[str, ant.Len(1, 1)] = "$"):
        super().__init_subclass__()
        cls.prefix = prefix
        cls.separator = separator

    def __new__(cls, s: str | None = None, /, key: str | None = None) -> t.Self:
        """
        `s` is a complete, prefixed key and is validated
        `key` is the bare shortuuid and is trusted (fast path for rows)
        neither generates a new key
        """
        if key is None:
            if s is not None:
                cls.check(s)
                return super().__new__(cls, s)
            key = shortuuid.uuid()
        return super().__new__(cls, cls.separator.join((cls.prefix, key)))

    @classmethod
    def check(cls, s: str) -> None:
        head = cls.prefix + cls.separator
        if not s.startswith(head):
            raise ValueError(f"invalid {cls.__name__}: key must begin with {head}")
        if len(s) != KeyLength + len(head):
            raise ValueError(f"invalid {cls.__name__}: key must have length {KeyLength}")
        alphabet = shortuuid.get_alphabet()
        if any(c not in alphabet for c in s[len(head) :]):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")

    @classmethod
    def validate_str(cls, v: ShortUUIDKey | str | None, _: p.ValidationInfo) -> ShortUUIDKey | None:
        return cls(v) if v is not None else v

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {"type": "string", "pattern": f"^{cls.prefix}\\{cls.separator}[0-9A-Za-z]{{{KeyLength}}}$"}

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str_schema = core_schema.chain_schema([
            core_schema.str_schema(),
            core_schema.with_info_after_validator_function(cls.validate_str, schema=core_schema.str_schema()),
        ])
        return core_schema.json_or_python_schema(
            json_schema=from_str_schema,
            python_schema=core_schema.union_schema([
                core_schema.is_instance_schema(cls),
                from_str_schema,
            ]),
            serialization=core_schema.plain_serializer_function_ser_schema(cls.__str__),
        )

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key!s}>"


# fmt: off
class AssessmentID(ShortUUIDKey, prefix="asmt"): ...
class QuestionID(ShortUUIDKey, prefix="qstn"): ...
class AttemptID(ShortUUIDKey, prefix="atmp"): ...
class AnswerID(ShortUUIDKey, prefix="answ"): ...
class ScoreRecordID(ShortUUIDKey, prefix="scor"): ...
class ViolationID(ShortUUIDKey, prefix="viol"): ...
class ReportID(ShortUUIDKey, prefix="rprt"): ...
# fmt: on
