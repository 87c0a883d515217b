# AI Core Module - model access, tracing and prompt safety

from app.ai.core.llm import ModelClient, ModelResponse, SdkClient, RestClient, build_model_client
from app.ai.core.telemetry import init_telemetry, get_tracer, agent_span
from app.ai.core.sanitizer import sanitize_prompt_text, detect_injection_markers

__all__ = [
    # Model clients
    "ModelClient", "ModelResponse", "SdkClient", "RestClient", "build_model_client",
    # Telemetry
    "init_telemetry", "get_tracer", "agent_span",
    # Prompt safety
    "sanitize_prompt_text", "detect_injection_markers",
]
