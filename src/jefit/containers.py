"""Dependency container wiring for the server and the device."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from jefit.adapters.coach_client import HttpxCoachClient
from jefit.adapters.json_file_store import JsonFileStore
from jefit.adapters.openai_advice_client import OpenAIAdviceClient
from jefit.adapters.supabase_sync_repository import SupabaseSyncRepository
from jefit.adapters.sync_client import HttpxSyncClient
from jefit.config import DeviceSettings, Settings
from jefit.services.advisory import AdvisoryService
from jefit.services.ledger import LocalLedger
from jefit.services.reconciler import SyncReconciler
from jefit.services.sync import SyncService


@dataclass
class AppContainer:
    """Holds sync-server dependencies."""

    settings: Settings
    sync_service: SyncService
    advisory_service: AdvisoryService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class DeviceSession:
    """Holds the device-side ledger and its remote collaborators."""

    settings: DeviceSettings
    ledger: LocalLedger
    reconciler: SyncReconciler
    advisory_service: AdvisoryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default server container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    sync_service = SyncService(
        repository=SupabaseSyncRepository(supabase_client),
        timezone=resolved_settings.timezone,
    )
    advice_client = OpenAIAdviceClient.create(
        api_key=resolved_settings.openai_api_key,
        model=resolved_settings.openai_model,
    )
    advisory_service = AdvisoryService(advice_client)

    async def close_resources() -> None:
        await advice_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        sync_service=sync_service,
        advisory_service=advisory_service,
        close_resources=close_resources,
    )


def build_device_session(settings: DeviceSettings | None = None) -> DeviceSession:
    """Create a device session with a loaded and pruned ledger."""
    resolved_settings = settings or DeviceSettings()
    ledger = LocalLedger(
        store=JsonFileStore.create(resolved_settings.ledger_path),
        timezone=resolved_settings.timezone,
    )
    ledger.load()
    sync_client = HttpxSyncClient.create(resolved_settings.sync_base_url)
    coach_client = HttpxCoachClient.create(resolved_settings.sync_base_url)

    async def close_resources() -> None:
        await sync_client.close()
        await coach_client.close()

    return DeviceSession(
        settings=resolved_settings,
        ledger=ledger,
        reconciler=SyncReconciler(
            ledger=ledger, client=sync_client, device_id=resolved_settings.device_id
        ),
        advisory_service=AdvisoryService(coach_client),
        close_resources=close_resources,
    )
