import uvicorn

from ledger.core.config import settings
from ledger.main import app

if __name__ == "__main__":
    uvicorn.run("ledger.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
