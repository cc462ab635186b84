"""Schemas de response."""
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class PagoResponse(BaseModel):
    """Pago persistido con su desglose y log de cálculo."""
    
    id: int | None = Field(None, description="ID del pago")
    instructor_id: int
    periodo_id: int
    monto_base: Decimal
    bonos: Decimal
    penalizaciones: Decimal
    reajuste: Decimal
    tipo_reajuste: str = Field(..., examples=["FIXED"])
    monto_reajuste: Decimal
    subtotal_reajustado: Decimal = Field(..., description="Monto antes de la retención")
    retencion: Decimal
    pago_final: Decimal
    estado: str = Field(..., examples=["PENDING"])
    comentarios: str | None = None
    log_calculo: list[str] = Field(default_factory=list, description="Auditoría del cálculo")
    detalle_clases: list[dict] = Field(default_factory=list)
    detalles: dict = Field(default_factory=dict)
    creado_en: datetime | None = None
    actualizado_en: datetime | None = None


class RecalcularPagoResponse(BaseModel):
    """Resultado estructurado de un recálculo."""
    
    success: bool
    message: str
    estado: str = Field(..., description="Estado final de la ejecución", examples=["SUCCEEDED"])
    payment_id: int | None = None
    skipped: bool = Field(False, description="Pago bloqueado (aprobado, pagado o cancelado)")
    logs: list[str] = Field(default_factory=list)
    pago: PagoResponse | None = None
    error: str | None = None
    error_type: str | None = None


class ResultadoInstructorResponse(BaseModel):
    """Resultado de un instructor dentro del lote."""
    
    instructor_id: int
    status: str = Field(..., examples=["success"])
    message: str
    payment_id: int | None = None
    error: str | None = None


class RecalcularPeriodoResponse(BaseModel):
    """Resumen del recálculo por lote."""
    
    periodo_id: int
    message: str
    total: int
    success_count: int
    error_count: int
    skipped_count: int
    deleted_payments_count: int = Field(..., description="Pagos previos reemplazados")
    results: list[ResultadoInstructorResponse]


class DuplicarFormulasResponse(BaseModel):
    """Resultado de la duplicación de fórmulas."""
    
    message: str
    count: int


class AsignacionCategoriaResponse(BaseModel):
    """Categoría vigente de un instructor por disciplina."""
    
    instructor_id: int
    periodo_id: int
    disciplina_id: int
    categoria: str = Field(..., examples=["AMBASSADOR"])
    etiqueta: str = Field(..., examples=["Ambassador"])
    manual: bool
    asignado_por: str | None = None
    motivo: str
    metricas: dict | None = None
    criterios: list[dict] = Field(default_factory=list)
    evaluaciones: list[dict] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response del health check."""
    
    status: str = Field(..., examples=["healthy"])
    service: str = Field(..., examples=["Pagos Instructores"])
    version: str = Field(..., examples=["0.1.0"])
    database: str = Field(..., examples=["connected"])
    redis: str = Field(..., examples=["connected"])
