from __future__ import annotations

from dataclasses import dataclass

from linkshelf.adapters.console_renderer import ConsoleRenderSink
from linkshelf.adapters.http.gateway import HttpLinkGateway
from linkshelf.adapters.json_storage import create_json_storage
from linkshelf.app_shell.config import ClientSettings
from linkshelf.app_shell.dispatcher import Dispatcher
from linkshelf.components.cache import LocalCache
from linkshelf.components.credentials import CredentialStore
from linkshelf.components.sync import SyncEngine
from linkshelf.components.view import ViewProjection
from linkshelf.core.ports.gateway import LinkGatewayPort
from linkshelf.core.ports.render import RenderSinkPort
from linkshelf.core.ports.storage import KeyValueStorePort
from linkshelf.domain.entities import ListFilters


@dataclass
class ServiceContext:
    settings: ClientSettings
    gateway: LinkGatewayPort
    credentials: CredentialStore
    cache: LocalCache
    engine: SyncEngine
    view: ViewProjection
    dispatcher: Dispatcher

    @classmethod
    def create(
        cls,
        settings: ClientSettings,
        *,
        gateway: LinkGatewayPort | None = None,
        sync_storage: KeyValueStorePort | None = None,
        local_storage: KeyValueStorePort | None = None,
        sink: RenderSinkPort | None = None,
    ) -> ServiceContext:
        # Adapters (overridable for tests)
        gateway = gateway or HttpLinkGateway(
            settings.api_base_url, timeout=settings.request_timeout_seconds
        )
        sync_storage = sync_storage or create_json_storage(settings.data_dir, "sync")
        local_storage = local_storage or create_json_storage(settings.data_dir, "local")
        sink = sink or ConsoleRenderSink()

        credentials = CredentialStore(sync_storage)
        cache = LocalCache(local_storage)
        engine = SyncEngine(
            gateway,
            credentials,
            cache,
            default_filters=ListFilters(page_size=settings.fetch_page_size),
        )
        view = ViewProjection(page_size=settings.page_size)
        dispatcher = Dispatcher(engine, view, sink, fetch_page_size=settings.fetch_page_size)

        return cls(
            settings=settings,
            gateway=gateway,
            credentials=credentials,
            cache=cache,
            engine=engine,
            view=view,
            dispatcher=dispatcher,
        )

    async def aclose(self) -> None:
        close = getattr(self.gateway, "aclose", None)
        if close is not None:
            await close()
