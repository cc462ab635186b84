"""Servicio de dominio para clasificación de horarios no prime."""
from datetime import datetime
from zoneinfo import ZoneInfo
import re


# Horas en formato 24h (HH:MM) por estudio
HORARIOS_NO_PRIME: dict[str, tuple[str, ...]] = {
    "Reducto": ("08:00", "09:00", "13:00", "18:00"),
    "San Isidro": ("09:00", "13:00"),
    "Primavera": ("09:00", "13:00", "18:00"),
    "Estancia": ("06:00", "09:15", "18:00"),
}


class ClasificadorHorario:
    """
    Determina si un estudio + hora es un horario no prime.

    Reglas de negocio:
    - La hora se normaliza a HH:MM (24h); acepta sufijos am/pm
    - Un estudio configurado coincide si su nombre está contenido
      (sin distinguir mayúsculas) en el nombre recibido
    - Basta con que un estudio coincidente liste la hora
    """

    def __init__(
        self,
        horarios_no_prime: dict[str, tuple[str, ...] | list[str]] | None = None,
        zona_horaria: str = "America/Lima",
    ):
        horarios = HORARIOS_NO_PRIME if horarios_no_prime is None else horarios_no_prime
        self._horarios = {
            estudio: frozenset(self.normalizar_hora(h) for h in horas)
            for estudio, horas in horarios.items()
        }
        self._zona = ZoneInfo(zona_horaria)

    @staticmethod
    def normalizar_hora(hora: str) -> str:
        """
        Normaliza una hora a HH:MM en 24h.

        Args:
            hora: "9:00am", "12PM", "18:00", etc.

        Returns:
            Hora normalizada; entradas mal formadas devuelven la mejor
            aproximación posible sin lanzar excepciones.
        """
        texto = (hora or "").strip().lower()
        es_am = "am" in texto
        es_pm = "pm" in texto

        partes = re.sub(r"[^\d:]", "", texto).split(":")
        horas_str = partes[0] if partes else ""
        minutos_str = partes[1] if len(partes) > 1 else ""

        if not horas_str.isdigit():
            if es_am or es_pm:
                horas_str = "0"
            else:
                return texto
        horas = int(horas_str)

        if es_pm and horas < 12:
            horas += 12
        elif es_am and horas == 12:
            horas = 0

        minutos = int(minutos_str) if minutos_str.isdigit() else 0
        return f"{horas:02d}:{minutos:02d}"

    def es_no_prime(self, estudio: str, hora: str) -> bool:
        """Indica si la hora es no prime en el estudio."""
        hora_normalizada = self.normalizar_hora(hora)
        estudio_lower = (estudio or "").lower()

        for estudio_config, horas in self._horarios.items():
            if estudio_config.lower() in estudio_lower and hora_normalizada in horas:
                return True

        return False

    def hora_local(self, inicio: datetime) -> datetime:
        """Convierte fechas con zona horaria a la hora local de los estudios."""
        if inicio.tzinfo is None:
            return inicio
        return inicio.astimezone(self._zona)

    def es_clase_no_prime(self, estudio: str, inicio: datetime) -> bool:
        """Clasifica una clase por su fecha de inicio."""
        return self.es_no_prime(estudio, self.hora_local(inicio).strftime("%H:%M"))
