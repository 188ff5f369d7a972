from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from asset_plugin_host.domain.events import CustomEvent
from asset_plugin_host.domain.plugins import descriptor_to_dict
from asset_plugin_host.plugins.errors import PluginDisabled, PluginError, PluginNotFound
from asset_plugin_host.services.plugin_registry import PluginRegistry


class CustomEventRequest(BaseModel):
    name: str
    data: Any = None


class PluginCallRequest(BaseModel):
    args: List[Any] = []


def _to_http_error(exc: PluginError) -> HTTPException:
    if isinstance(exc, PluginNotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PluginDisabled):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def create_app(registry: PluginRegistry) -> FastAPI:
    app = FastAPI(title="Asset Plugin Host", version="0.1.0")

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "plugins": len(registry.list())}

    @app.get("/api/plugins")
    async def api_plugins() -> List[Dict[str, Any]]:
        items = sorted(registry.list(), key=lambda d: d.name)
        return [descriptor_to_dict(d) for d in items]

    @app.get("/api/plugins/{name}")
    async def api_plugin(name: str) -> Dict[str, Any]:
        descriptor = registry.get(name)
        if descriptor is None:
            raise HTTPException(status_code=404, detail=f"Plugin not found: {name}")
        return descriptor_to_dict(descriptor)

    @app.post("/api/plugins/reload")
    async def api_plugins_reload() -> List[Dict[str, Any]]:
        try:
            loaded = registry.load_all()
        except PluginError as exc:
            raise _to_http_error(exc)
        return [descriptor_to_dict(d) for d in loaded]

    @app.post("/api/plugins/{name}/enable")
    async def api_plugin_enable(name: str) -> Dict[str, Any]:
        try:
            return descriptor_to_dict(registry.set_enabled(name, True))
        except PluginError as exc:
            raise _to_http_error(exc)

    @app.post("/api/plugins/{name}/disable")
    async def api_plugin_disable(name: str) -> Dict[str, Any]:
        try:
            return descriptor_to_dict(registry.set_enabled(name, False))
        except PluginError as exc:
            raise _to_http_error(exc)

    @app.post("/api/plugins/{name}/unload")
    async def api_plugin_unload(name: str) -> Dict[str, Any]:
        try:
            registry.unload_plugin(name)
        except PluginError as exc:
            raise _to_http_error(exc)
        return {"name": name, "unloaded": True}

    @app.post("/api/plugins/{name}/call/{function_name}")
    async def api_plugin_call(name: str, function_name: str, req: PluginCallRequest) -> Dict[str, Any]:
        try:
            result = registry.call(name, function_name, *req.args)
        except PluginError as exc:
            raise _to_http_error(exc)
        return {"name": name, "function": function_name, "result": result}

    @app.post("/api/events")
    async def api_events(req: CustomEventRequest) -> Dict[str, Any]:
        try:
            event = CustomEvent(name=req.name, data=req.data)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        registry.broadcast(event)
        return {"event": event.name, "handler": event.handler_name, "delivered": True}

    return app
