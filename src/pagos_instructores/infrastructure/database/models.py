"""Modelos SQLAlchemy."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Valor de `formulas.categoria` para la fórmula por defecto de la disciplina
CATEGORIA_POR_DEFECTO = "DEFAULT"


class Base(DeclarativeBase):
    """Clase base para modelos."""
    pass


class PeriodoModel(Base):
    """Períodos de pago (número/año)."""
    __tablename__ = "periodos"
    __table_args__ = (UniqueConstraint("tenant_id", "anio", "numero"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default", index=True)
    numero: Mapped[int] = mapped_column(Integer)
    anio: Mapped[int] = mapped_column(Integer)


class DisciplinaModel(Base):
    """Disciplinas (dueñas de las fórmulas)."""
    __tablename__ = "disciplinas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default", index=True)
    nombre: Mapped[str] = mapped_column(String(100))
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)


class InstructorModel(Base):
    """Instructores."""
    __tablename__ = "instructores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default", index=True)
    nombre: Mapped[str] = mapped_column(String(200))
    activo: Mapped[bool] = mapped_column(Boolean, default=True)

    clases: Mapped[list["ClaseModel"]] = relationship(back_populates="instructor")


class CumplimientoModel(Base):
    """Hechos de cumplimiento por instructor y período (carga externa)."""
    __tablename__ = "cumplimientos"
    __table_args__ = (UniqueConstraint("tenant_id", "instructor_id", "periodo_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default")
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("instructores.id"))
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("periodos.id"))
    participacion_eventos: Mapped[bool] = mapped_column(Boolean, default=False)
    cumple_lineamientos: Mapped[bool] = mapped_column(Boolean, default=True)
    covers: Mapped[int] = mapped_column(Integer, default=0)
    brandeos: Mapped[int] = mapped_column(Integer, default=0)
    theme_rides: Mapped[int] = mapped_column(Integer, default=0)
    puntos_penalizacion: Mapped[int] = mapped_column(Integer, default=0)
    pago_workshops: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)


class ClaseModel(Base):
    """Clases dictadas (solo lectura para el motor)."""
    __tablename__ = "clases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default", index=True)
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("instructores.id"))
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("periodos.id"))
    disciplina_id: Mapped[int] = mapped_column(Integer, ForeignKey("disciplinas.id"))
    estudio: Mapped[str] = mapped_column(String(200))
    salon: Mapped[str] = mapped_column(String(100), default="")
    fecha: Mapped[datetime] = mapped_column(DateTime)
    cupos: Mapped[int] = mapped_column(Integer)
    reservas_totales: Mapped[int] = mapped_column(Integer, default=0)
    reservas_pagadas: Mapped[int] = mapped_column(Integer, default=0)
    texto_especial: Mapped[str | None] = mapped_column(String(255), nullable=True)
    numero_versus: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relaciones
    instructor: Mapped["InstructorModel"] = relationship(back_populates="clases")


class FormulaModel(Base):
    """Fórmulas por período, disciplina y categoría (`DEFAULT` = por defecto)."""
    __tablename__ = "formulas"
    __table_args__ = (
        UniqueConstraint("tenant_id", "periodo_id", "disciplina_id", "categoria"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default", index=True)
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("periodos.id"))
    disciplina_id: Mapped[int] = mapped_column(Integer, ForeignKey("disciplinas.id"))
    # NOT NULL: la restricción única también cubre la fórmula por defecto
    categoria: Mapped[str] = mapped_column(String(30), default=CATEGORIA_POR_DEFECTO)
    terminos: Mapped[list] = mapped_column(JSON)


class RequisitoCategoriaModel(Base):
    """Umbrales de una categoría en un período y disciplina."""
    __tablename__ = "requisitos_categoria"
    __table_args__ = (
        UniqueConstraint("tenant_id", "periodo_id", "disciplina_id", "categoria"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default", index=True)
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("periodos.id"))
    disciplina_id: Mapped[int] = mapped_column(Integer, ForeignKey("disciplinas.id"))
    categoria: Mapped[str] = mapped_column(String(30))
    umbrales: Mapped[dict] = mapped_column(JSON)


class AsignacionCategoriaModel(Base):
    """Categoría vigente de un instructor por período y disciplina."""
    __tablename__ = "asignaciones_categoria"
    __table_args__ = (
        UniqueConstraint("tenant_id", "instructor_id", "periodo_id", "disciplina_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default")
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("instructores.id"))
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("periodos.id"))
    disciplina_id: Mapped[int] = mapped_column(Integer, ForeignKey("disciplinas.id"))
    categoria: Mapped[str] = mapped_column(String(30))
    manual: Mapped[bool] = mapped_column(Boolean, default=False)
    asignado_por: Mapped[str | None] = mapped_column(String(200), nullable=True)
    metricas: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    criterios: Mapped[list] = mapped_column(JSON, default=list)
    evaluaciones: Mapped[list] = mapped_column(JSON, default=list)
    actualizado_en: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class PagoModel(Base):
    """Pago de un instructor en un período (único por tenant)."""
    __tablename__ = "pagos"
    __table_args__ = (UniqueConstraint("tenant_id", "instructor_id", "periodo_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), default="default")
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("instructores.id"))
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("periodos.id"))
    monto_base: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    bonos: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    penalizaciones: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    reajuste: Mapped[Decimal] = mapped_column(Numeric(14, 4), default=0)
    tipo_reajuste: Mapped[str] = mapped_column(String(20), default="FIXED")
    monto_reajuste: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    subtotal_reajustado: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    retencion: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    pago_final: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    estado: Mapped[str] = mapped_column(String(20), default="PENDING")
    log_calculo: Mapped[list] = mapped_column(JSON, default=list)
    detalle_clases: Mapped[list] = mapped_column(JSON, default=list)
    detalles: Mapped[dict] = mapped_column(JSON, default=dict)
    comentarios: Mapped[str | None] = mapped_column(Text, nullable=True)
    creado_en: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    actualizado_en: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )
