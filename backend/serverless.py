"""
Arranque en modo por invocación (Vercel / AWS Lambda).

No hay listener propio: `app` es la app ASGI (Vercel la usa directamente) y
`handler` la envuelve con Mangum para Lambda. La conexión a MongoDB se
comprueba en cada petición y nunca se termina el proceso si falla.
"""
from mangum import Mangum

from .config import configure_logging, load_settings
from .database import DatabaseConnector
from .main import ExecutionMode, create_app

settings = load_settings()
configure_logging(settings.log_level)

connector = DatabaseConnector.from_settings(settings)
app = create_app(settings, connector, ExecutionMode.PER_INVOCATION)

handler = Mangum(app, lifespan="off")
