"""Configuración de logging estructurado."""
import logging
import sys

LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-30s | "
    "%(funcName)-20s | %(message)s"
)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configura logging para toda la aplicación.
    
    Se puede llamar varias veces (una por app creada); el handler de
    consola se instala solo una vez.
    
    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR)
    
    Returns:
        Logger de la aplicación
    """
    nivel = getattr(logging, level.upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(nivel)
    if not any(getattr(h, "_pagos_instructores", False) for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._pagos_instructores = True
        root_logger.addHandler(handler)
    
    # Reducir ruido de librerías externas
    for nombre in ("httpx", "httpcore", "uvicorn.access", "aiomysql", "sqlalchemy.engine"):
        logging.getLogger(nombre).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    
    logger.setLevel(nivel)
    return logger


# Logger global de la aplicación; los casos de uso lo importan directamente
logger = logging.getLogger("pagos_instructores")
