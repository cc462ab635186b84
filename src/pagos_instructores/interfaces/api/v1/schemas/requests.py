"""Schemas de request."""
from decimal import Decimal
from pydantic import BaseModel, Field

from pagos_instructores.domain.value_objects.categoria import Categoria
from pagos_instructores.domain.value_objects.reajuste import TipoReajuste


class RecalcularPagoRequest(BaseModel):
    """Request para recalcular el pago de un instructor."""
    
    instructor_id: int = Field(..., gt=0, description="ID del instructor", examples=[12])
    periodo_id: int = Field(..., gt=0, description="ID del período", examples=[3])
    categorias_manuales: dict[int, Categoria] = Field(
        default_factory=dict,
        description="Categoría forzada por disciplina (disciplina_id → categoría)",
        examples=[{"1": "AMBASSADOR"}],
    )
    reajuste: Decimal | None = Field(
        None,
        description="Reajuste manual; si se omite se preserva el del pago previo",
        examples=["100.00"],
    )
    tipo_reajuste: TipoReajuste = Field(TipoReajuste.FIXED, description="FIXED o PERCENTAGE")
    asignado_por: str | None = Field(None, description="Administrador que fuerza categorías")


class RecalcularPeriodoRequest(BaseModel):
    """Request para recalcular todos los instructores de un período."""
    
    periodo_id: int = Field(..., gt=0, description="ID del período", examples=[3])


class DuplicarFormulasRequest(BaseModel):
    """Request para duplicar fórmulas entre períodos."""
    
    periodo_origen_id: int = Field(..., gt=0, description="Período desde el que se copia")
    periodo_destino_id: int = Field(..., gt=0, description="Período que se reemplaza")


class CategoriaManualRequest(BaseModel):
    """Request para fijar una categoría manual."""
    
    instructor_id: int = Field(..., gt=0)
    periodo_id: int = Field(..., gt=0)
    disciplina_id: int = Field(..., gt=0)
    categoria: Categoria = Field(..., examples=["SENIOR_AMBASSADOR"])
    asignado_por: str | None = Field(None, description="Administrador responsable")
