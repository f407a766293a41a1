# app/models/activity.py
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.core.exceptions import (
    FieldError,
    InvalidMaterialError,
    InvalidStateError,
    raise_for_errors,
)
from app.db.base import Base, new_id, utcnow
from app.models.user import normalize_email


class ActivityStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class QuestionKind(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    ESSAY = "essay"


class MaterialKind(str, Enum):
    TEXT = "text"
    LINK = "link"
    PDF = "pdf"


def _is_blank(value) -> bool:
    return value is None or not str(value).strip()


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    subject = Column(String(100), nullable=False, index=True)
    grade_level = Column(String(50), nullable=False, index=True)
    objective = Column(Text, nullable=True)

    # [{id, kind, content, title}]
    support_materials = Column(JSON, nullable=False, default=list)
    # [{id, prompt, kind, choices, correct_answer}]
    content = Column(JSON, nullable=False, default=list)

    # 状态：draft / published
    status = Column(String(20), nullable=False, default="draft", index=True)
    is_public = Column(Boolean, nullable=False, default=False, index=True)
    finalized = Column(Boolean, nullable=False, default=False)
    due_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    enrollments = relationship(
        "Enrollment",
        back_populates="activity",
        cascade="all, delete-orphan",
        order_by="Enrollment.enrolled_at",
        lazy="selectin",
    )
    answer_sets = relationship(
        "AnswerSet",
        back_populates="activity",
        cascade="all, delete-orphan",
        order_by="AnswerSet.created_at",
        lazy="selectin",
    )

    def __init__(self, **kwargs):
        # Defaults are needed in memory, before the first flush
        now = utcnow()
        kwargs.setdefault("status", ActivityStatus.DRAFT.value)
        kwargs.setdefault("is_public", False)
        kwargs.setdefault("finalized", False)
        kwargs.setdefault("support_materials", [])
        kwargs.setdefault("content", [])
        kwargs.setdefault("created_at", now)
        kwargs.setdefault("updated_at", now)
        super().__init__(**kwargs)

    def touch(self) -> None:
        self.updated_at = utcnow()

    # --- state transitions ---------------------------------------------

    def publish(self) -> None:
        if self.status == ActivityStatus.PUBLISHED:
            raise InvalidStateError("Atividade já está publicada.")
        self.status = ActivityStatus.PUBLISHED.value
        self.touch()

    def unpublish(self) -> None:
        if self.status == ActivityStatus.DRAFT:
            raise InvalidStateError("Atividade já está como rascunho.")
        self.status = ActivityStatus.DRAFT.value
        self.touch()

    # make_public / make_private are unguarded on purpose, unlike publish
    def make_public(self) -> None:
        self.is_public = True
        self.touch()

    def make_private(self) -> None:
        self.is_public = False
        self.touch()

    def finalize(self) -> None:
        if self.finalized:
            raise InvalidStateError("Atividade já está finalizada.")
        self.finalized = True
        self.touch()

    # --- queries -------------------------------------------------------

    def is_published(self) -> bool:
        return self.status == ActivityStatus.PUBLISHED

    def belongs_to_teacher(self, teacher_id) -> bool:
        if teacher_id is None or self.owner_id is None:
            return False
        return str(self.owner_id) == str(teacher_id)

    def is_enrolled(self, email: str | None) -> bool:
        if not email:
            return False
        email = normalize_email(email)
        return any(e.student_email == email for e in self.enrollments)

    def question_ids(self) -> set[str]:
        return {str(q.get("id")) for q in self.content or [] if q.get("id")}

    def find_enrollment(self, enrollment_id: str):
        return next((e for e in self.enrollments if e.id == enrollment_id), None)

    def find_answer_set(self, answer_set_id: str):
        return next((a for a in self.answer_sets if a.id == answer_set_id), None)

    def answer_set_for(self, submitter_id: str):
        return next(
            (a for a in self.answer_sets if str(a.submitter_id) == str(submitter_id)),
            None,
        )

    # --- content -------------------------------------------------------

    def add_support_material(self, material: dict) -> None:
        if _is_blank(material.get("kind")) or _is_blank(material.get("content")):
            raise InvalidMaterialError(
                "Material de apoio inválido. Deve conter tipo e conteúdo.",
                field="support_materials",
            )
        if material["kind"] not in [kind.value for kind in MaterialKind]:
            raise InvalidMaterialError(
                'Material de apoio inválido. Tipo deve ser "text", "link" ou "pdf".',
                field="support_materials",
            )
        material = dict(material)
        material.setdefault("id", new_id())
        # JSON columns only see reassignment, not in-place mutation
        self.support_materials = [*(self.support_materials or []), material]
        self.touch()

    def validate(self) -> None:
        """
        Check required fields, status and every question.
        Errors on questions name their index, e.g. ``Conteúdo[0]``.
        """
        errors: list[FieldError] = []
        required = [
            ("title", "Título é obrigatório."),
            ("description", "Descrição é obrigatória."),
            ("subject", "Disciplina é obrigatória."),
            ("grade_level", "Série/Ano é obrigatório."),
            ("owner_id", "Professor é obrigatório."),
        ]
        for field, message in required:
            if _is_blank(getattr(self, field)):
                errors.append(FieldError("missing_field", field, message))

        if self.status not in [status.value for status in ActivityStatus]:
            errors.append(FieldError("invalid_status", "status", "Status inválido."))

        for index, material in enumerate(self.support_materials or []):
            if (
                _is_blank(material.get("content"))
                or material.get("kind") not in [kind.value for kind in MaterialKind]
            ):
                errors.append(
                    FieldError(
                        "invalid_material",
                        f"support_materials[{index}]",
                        f"Materiais[{index}]: Material de apoio deve conter "
                        'tipo ("text", "link" ou "pdf") e conteúdo.',
                    )
                )

        for index, item in enumerate(self.content or []):
            prefix = f"Conteúdo[{index}]"
            if _is_blank(item.get("prompt")):
                errors.append(
                    FieldError(
                        "missing_field",
                        f"content[{index}].prompt",
                        f"{prefix}: Pergunta é obrigatória.",
                    )
                )
            kind = item.get("kind")
            if kind not in [k.value for k in QuestionKind]:
                errors.append(
                    FieldError(
                        "invalid_question_kind",
                        f"content[{index}].kind",
                        f'{prefix}: Tipo deve ser "multiple_choice" ou "essay".',
                    )
                )
            elif kind == QuestionKind.MULTIPLE_CHOICE and not item.get("choices"):
                errors.append(
                    FieldError(
                        "missing_choices",
                        f"content[{index}].choices",
                        f"{prefix}: Questões de múltipla escolha devem ter "
                        "pelo menos uma alternativa.",
                    )
                )

        raise_for_errors(errors)
