import logging
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from corrosionbot.api_keys import api_keys_manager
from corrosionbot.chat import CoatingsAssistant
from corrosionbot.config_loader import get_config
from corrosionbot.logic.catalog import catalog_entries
from corrosionbot.logic.cycle_selector import area_families
from corrosionbot.logic.engine import CorrosionEngine
from corrosionbot.logic.errors import InvalidInput, UpstreamUnavailable
from corrosionbot.models import AnalyzeRequest, ChatRequest, ChatResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="CorrosionBot API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)


_engine: Optional[CorrosionEngine] = None
_assistant: Optional[CoatingsAssistant] = None


def get_engine() -> CorrosionEngine:
    """Process-wide engine; built on first request."""
    global _engine
    if _engine is None:
        _engine = CorrosionEngine()
    return _engine


def get_assistant() -> CoatingsAssistant:
    global _assistant
    if _assistant is None:
        _assistant = CoatingsAssistant()
    return _assistant


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/")
async def root():
    config = get_config()
    return {"message": f"{config.app.name} API is running", "version": config.app.version}


@app.get("/health")
async def health():
    """Liveness plus which LLM collaborators can actually be called."""
    llm = get_config().llm
    return {
        "status": "healthy",
        "providers": [s.model_dump() for s in api_keys_manager.get_status()],
        "classifierReady": api_keys_manager.is_model_ready(llm.classifier_model),
        "chatReady": api_keys_manager.is_model_ready(llm.chat_model),
    }


@app.get("/config/options")
async def get_form_options():
    """Option lists for the inspection form."""
    ui = get_config().ui
    return {
        "areas": ui.areas,
        "environments": ui.environments,
        "substrates": ui.substrates,
        "existingSystems": ui.existing_systems,
        "maxImages": ui.max_images,
    }


@app.get("/catalog")
async def get_catalog():
    """Read-only product catalog and recognised area families."""
    return {"products": catalog_entries(), "areaFamilies": area_families()}


@app.post("/analyze")
def analyze(request: AnalyzeRequest, engine: CorrosionEngine = Depends(get_engine)):
    """Classify inspection photos and recommend a repair cycle for each."""
    try:
        report = engine.run(request.images, request.meta)
        return report.to_dict()
    except InvalidInput as e:
        return _error(400, str(e))
    except UpstreamUnavailable as e:
        logger.error(f"Analyze failed upstream: {e}")
        return _error(500, str(e))
    except Exception as e:
        logger.exception("Analyze failed")
        return _error(500, str(e) or "Internal error")


@app.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest, assistant: CoatingsAssistant = Depends(get_assistant)):
    """Free-text follow-up question about the last inspection result."""
    try:
        answer = assistant.ask(
            request.question,
            meta=request.meta,
            last_result=request.last_result,
            history=[turn.model_dump() for turn in request.history],
        )
        return ChatResponse(answer=answer)
    except InvalidInput as e:
        return _error(400, str(e))
    except UpstreamUnavailable as e:
        logger.error(f"Chat failed upstream: {e}")
        return _error(500, str(e))
    except Exception as e:
        logger.exception("Chat failed")
        return _error(500, str(e) or "Internal error")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
