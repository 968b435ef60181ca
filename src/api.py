"""
Status API - read-only view of reconciliation state plus manual triggers.

Routes:
    GET  /health
    GET  /api/v1/instances
    GET  /api/v1/instances/{name}
    POST /api/v1/instances/{name}/reconcile
    GET  /api/v1/events                      (Server-Sent Events)
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from controller import Controller
from events import EventBus, EventType
from reconciler import ReconcileOutcome

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "nebularr"
    instances: int = 0


class ChangeCounts(BaseModel):
    creates: int = 0
    updates: int = 0
    deletes: int = 0


class UnrealizedFeatureModel(BaseModel):
    feature: str
    reason: str


class HealthIssueModel(BaseModel):
    source: str
    type: str
    message: str


class InstanceSummary(BaseModel):
    """One row of the instance listing."""

    name: str
    app: str
    url: str
    status: str = Field("Pending", description="Synced, InSync, PartiallyApplied, Failed or Pending")
    last_applied_hash: str = ""
    drift_detected: bool = False
    finished_at: Optional[str] = None


class InstanceStatus(InstanceSummary):
    """Full outcome of the instance's last reconciliation."""

    phase: str = "pending"
    message: str = ""
    service_version: str = ""
    source_hash: str = ""
    changes: ChangeCounts = Field(default_factory=ChangeCounts)
    applied: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)
    unrealized: List[UnrealizedFeatureModel] = Field(default_factory=list)
    healthy: Optional[bool] = None
    health_issues: List[HealthIssueModel] = Field(default_factory=list)
    duration_seconds: float = 0.0


class ReconcileAccepted(BaseModel):
    name: str
    message: str = "Reconciliation triggered"


def _outcome_fields(outcome: Optional[ReconcileOutcome]) -> Dict[str, Any]:
    return outcome.to_dict() if outcome is not None else {}


def create_app(controller: Controller, event_bus: Optional[EventBus] = None) -> FastAPI:
    """
    Build the FastAPI application around a running controller.

    Args:
        controller: Source of instance definitions and outcomes
        event_bus: Enables ``/api/v1/events`` when given
    """
    app = FastAPI(
        title="nebularr",
        description="Declarative configuration reconciler for *arr services",
        version="1.0.0",
    )

    def _instance_or_404(name: str):
        instance = controller.instances.get(name)
        if instance is None:
            raise HTTPException(status_code=404, detail=f"Instance '{name}' not found")
        return instance

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(instances=len(controller.instances))

    @app.get("/api/v1/instances", response_model=List[InstanceSummary])
    async def list_instances():
        summaries = []
        for name in sorted(controller.instances):
            instance = controller.instances[name]
            fields = _outcome_fields(controller.get_outcome(name))
            summaries.append(
                InstanceSummary(
                    name=name,
                    app=instance.app,
                    url=instance.url,
                    status=fields.get("status", "Pending"),
                    last_applied_hash=fields.get("last_applied_hash", ""),
                    drift_detected=fields.get("drift_detected", False),
                    finished_at=fields.get("finished_at"),
                )
            )
        return summaries

    @app.get("/api/v1/instances/{name}", response_model=InstanceStatus)
    async def get_instance(name: str):
        instance = _instance_or_404(name)
        fields = _outcome_fields(controller.get_outcome(name))
        fields.pop("instance", None)
        fields.pop("app", None)
        return InstanceStatus(name=name, app=instance.app, url=instance.url, **fields)

    @app.post("/api/v1/instances/{name}/reconcile", response_model=ReconcileAccepted, status_code=202)
    async def trigger_reconcile(name: str):
        """Queue an immediate reconciliation of one instance."""
        _instance_or_404(name)
        await controller.trigger_reconciliation(name)
        return ReconcileAccepted(name=name)

    # ==================== Event Streaming ====================

    @app.get("/api/v1/events")
    async def stream_events(instance: Optional[str] = None, event_type: Optional[str] = None):
        """SSE stream of reconciliation events, optionally for one instance or event type."""
        if event_bus is None:
            raise HTTPException(status_code=503, detail="Event streaming not available")

        event_types = None
        if event_type:
            try:
                event_types = [EventType(event_type.upper())]
            except ValueError:
                raise HTTPException(status_code=400, detail=f"Unknown event type '{event_type}'")

        subscriber_id, subscription = await event_bus.subscribe(
            instance=instance, event_types=event_types
        )

        async def event_generator():
            try:
                async for event in subscription:
                    yield event.to_sse()
            except asyncio.CancelledError:
                logger.debug(f"Event stream {subscriber_id} cancelled")
            finally:
                await event_bus.unsubscribe(subscriber_id)

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )

    return app


class StatusServer:
    """Runs the status API under uvicorn alongside the controller."""

    def __init__(self, app: FastAPI, host: str = "0.0.0.0", port: int = 8000, log_level: str = "info"):
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level
        self.server: Optional[uvicorn.Server] = None

    async def start(self) -> None:
        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level=self.log_level.lower(),
        )
        self.server = uvicorn.Server(config)
        logger.info(f"Starting status API on {self.host}:{self.port}")
        await self.server.serve()

    async def stop(self) -> None:
        logger.info("Stopping status API")
        if self.server:
            self.server.should_exit = True
