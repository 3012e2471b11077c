"""
Templated video service factory (video package)
"""

from slideavatar.configs.config import config

from .heygen import HeyGenTemplateService
from .interface import TemplateVideoInterface


class TemplateVideoFactory:
    """Factory for creating templated video service instances"""

    _services: dict[str, type[TemplateVideoInterface]] = {
        "heygen": HeyGenTemplateService,
    }

    @classmethod
    def create_service(cls, service_name: str = "heygen") -> TemplateVideoInterface:
        if service_name not in cls._services:
            raise ValueError(
                f"Unknown video service: {service_name}. Available: {list(cls._services.keys())}"
            )

        if service_name == "heygen":
            service_instance: TemplateVideoInterface = HeyGenTemplateService(
                api_key=config.heygen_api_key,
                base_url=config.heygen_base_url,
                timeout=config.heygen_request_timeout,
            )
        else:
            service_instance = cls._services[service_name]()

        if not service_instance.is_available():
            raise ValueError(
                f"Video service '{service_name}' is not properly configured."
            )
        return service_instance

    @classmethod
    def register(cls, name: str, service_class: type[TemplateVideoInterface]) -> None:
        cls._services[name] = service_class
