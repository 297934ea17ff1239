from auto_messenger.messaging.api.routes.control_routes import router

__all__ = ["router"]
