from __future__ import annotations

import asyncio
import io
from dataclasses import replace

import pytest
from azure.core.exceptions import HttpResponseError
from rich.console import Console

from acisample import tutorial
from acisample.azure.session import Session
from acisample.config import AciConfig
from acisample.core.exceptions import PollCancelledError, PollTimeoutError, ProvisioningError
from acisample.model import Subscription
from acisample.prompt import AutoPrompter
from acisample.tutorial import Walkthrough, multi_container_spec, single_container_spec
from tests.conftest import FakeAzureClient, FakeTime


def _console() -> tuple[Console, io.StringIO]:
    out = io.StringIO()
    return Console(file=out, force_terminal=False, width=200), out


def _walkthrough(config, client, prompter=None, fake_time: FakeTime | None = None, cancel=None):
    console, out = _console()
    w = Walkthrough(
        config,
        client,  # type: ignore[arg-type]
        console=console,
        prompter=prompter or AutoPrompter(),
        cancel=cancel,
        sleep=(fake_time or FakeTime()).sleep,
    )
    return w, out


class TestSpecs:
    def test_single_container(self, config: AciConfig):
        spec = single_container_spec(config)
        assert spec.name == "aci-abc123"
        assert spec.dns_prefix == "aci-abc123"
        (container,) = spec.containers
        assert container.name == "aci-abc123-1"
        assert container.cpu == 1.0
        assert container.memory_gb == 1.0
        assert container.ports == (80,)

    def test_multi_container(self, config: AciConfig):
        spec = multi_container_spec(config)
        assert spec.name == "aci-abc123-multi"
        web, sidecar = spec.containers
        assert (web.name, web.cpu, web.ports) == ("aci-abc123-multi-1", 0.5, (80,))
        assert (sidecar.name, sidecar.cpu, sidecar.ports) == ("aci-abc123-multi-2", 0.5, ())
        assert sidecar.image == config.sidecar_image
        assert spec.public_ports == (80,)


class TestWalkthrough:
    @pytest.mark.asyncio
    async def test_full_run(self, config: AciConfig):
        client = FakeAzureClient(visible_after=2, running_after=2)
        prompter = AutoPrompter()
        w, out = _walkthrough(config, client, prompter)

        result = await w.run()

        assert result.resource_group == "rg-aci-test01"
        assert [h.name for h in result.created] == ["aci-abc123", "aci-abc123-multi"]
        assert result.listed == ("aci-abc123", "aci-abc123-multi")
        assert result.details is not None and result.details.state == "Running"
        assert result.logs == "listening on port 80\n"
        assert [d.rsplit("/", 1)[-1] for d in result.deleted] == ["aci-abc123", "aci-abc123-multi"]
        assert result.resource_group_deleted
        assert client.groups == {}
        assert client.deleted_resource_groups == ["rg-aci-test01"]
        assert prompter.asked == [
            "Press ENTER to delete container group 'aci-abc123':",
            "Press ENTER to delete container group 'aci-abc123-multi':",
            "Delete resource group 'rg-aci-test01'?",
            "Press ENTER to exit...",
        ]

        text = out.getvalue()
        assert "Creating resource group 'rg-aci-test01'..." in text
        assert "Creating multi-container container group 'aci-abc123-multi'" in text
        assert "will be reachable at http://aci-abc123.eastus.azurecontainer.io" in text
        assert "Listing container groups in resource group 'rg-aci-test01'..." in text
        assert "Running" in text
        assert "Deleting container group 'aci-abc123-multi'..." in text
        assert "Deleting resource group 'rg-aci-test01'..." in text

    @pytest.mark.asyncio
    async def test_declining_keeps_resource_group(self, config: AciConfig):
        client = FakeAzureClient()
        w, _ = _walkthrough(config, client, AutoPrompter(answer=False))

        result = await w.run()

        assert not result.resource_group_deleted
        assert "rg-aci-test01" in client.resource_groups

    @pytest.mark.asyncio
    async def test_keep_resource_group_skips_question(self, config: AciConfig):
        client = FakeAzureClient()
        prompter = AutoPrompter()
        w, out = _walkthrough(replace(config, delete_resource_group=False), client, prompter)

        result = await w.run()

        assert not result.resource_group_deleted
        assert not any(q.startswith("Delete resource group") for q in prompter.asked)
        assert "Keeping resource group 'rg-aci-test01'" in out.getvalue()

    @pytest.mark.asyncio
    async def test_details_poll_prints_progress(self, config: AciConfig):
        client = FakeAzureClient(visible_after=3, running_after=2)
        fake_time = FakeTime()
        w, out = _walkthrough(config, client, fake_time=fake_time)
        await client.create_container_group(single_container_spec(config))

        h = await w.print_details("aci-abc123")

        assert h.is_running
        # 3 absent lookups, then Pending on discovery and once more before Running.
        assert len(fake_time.sleeps) == 4
        assert "Getting container group details for container group 'aci-abc123'......" in out.getvalue()

    @pytest.mark.asyncio
    async def test_failed_group_surfaces(self, config: AciConfig):
        client = FakeAzureClient()
        w, _ = _walkthrough(config, client)
        created = await client.create_container_group(single_container_spec(config))
        client.groups[created.name] = replace(created, state="Failed")
        client.running_after = 10**6

        with pytest.raises(ProvisioningError):
            await w.print_details("aci-abc123")

    @pytest.mark.asyncio
    async def test_poll_timeout_applies(self, config: AciConfig):
        client = FakeAzureClient(running_after=10**6)
        cfg = replace(config, poll_interval=0.01, poll_timeout=0.05)
        console, _ = _console()
        w = Walkthrough(cfg, client, console=console, prompter=AutoPrompter())  # type: ignore[arg-type]
        await client.create_container_group(single_container_spec(cfg))

        with pytest.raises(PollTimeoutError):
            await w.print_details("aci-abc123")

    @pytest.mark.asyncio
    async def test_cancel_stops_waiting_for_missing_group(self, config: AciConfig):
        client = FakeAzureClient()
        cancel = asyncio.Event()
        fake_time = FakeTime()
        w, _ = _walkthrough(config, client, fake_time=fake_time, cancel=cancel)

        async def cancel_soon():
            while len(fake_time.sleeps) < 3:
                await asyncio.sleep(0)
            cancel.set()

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(PollCancelledError):
            await w.find("aci-never-created")
        await canceller

    @pytest.mark.asyncio
    async def test_failed_creation_stops_polling(self, config: AciConfig):
        client = FakeAzureClient()

        async def boom(spec):
            raise RuntimeError("quota exceeded")

        client.create_container_group = boom  # type: ignore[method-assign]
        w, _ = _walkthrough(config, client)

        with pytest.raises(ProvisioningError, match="quota exceeded") as exc:
            await w.create_container_group(single_container_spec(config))

        assert isinstance(exc.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_transient_creation_failure_is_final(self, config: AciConfig):
        client = FakeAzureClient()
        unavailable = HttpResponseError(message="Service Unavailable")
        unavailable.status_code = 503

        async def throttled(spec):
            raise unavailable

        client.create_container_group = throttled  # type: ignore[method-assign]
        fake_time = FakeTime()
        w, _ = _walkthrough(config, client, fake_time=fake_time)

        with pytest.raises(ProvisioningError, match="Creating container group 'aci-abc123' failed") as exc:
            await w.create_container_group(single_container_spec(config))

        assert exc.value.__cause__ is unavailable
        assert len(fake_time.sleeps) == 1

    @pytest.mark.asyncio
    async def test_logs_of_first_container(self, config: AciConfig):
        client = FakeAzureClient()
        w, out = _walkthrough(config, client)
        await client.create_container_group(multi_container_spec(config))

        logs = await w.print_logs("aci-abc123-multi")

        assert logs == "listening on port 80\n"
        assert "Logs for container 'aci-abc123-multi-1':" in out.getvalue()


class TestRun:
    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self, config: AciConfig):
        client = FakeAzureClient()
        console, _ = _console()

        await tutorial.run(config, client=client, prompter=AutoPrompter(), console=console)  # type: ignore[arg-type]

        assert not client.closed

    @pytest.mark.asyncio
    async def test_authenticates_and_closes_own_client(self, config: AciConfig, monkeypatch):
        client = FakeAzureClient()
        console, _ = _console()

        async def fake_authenticate(cfg, *, console):
            assert cfg is config
            return Session(client=client, subscription=Subscription(id="s", display_name="Test"))  # type: ignore[arg-type]

        monkeypatch.setattr(tutorial, "authenticate", fake_authenticate)

        result = await tutorial.run(config, prompter=AutoPrompter(), console=console)

        assert result.resource_group_deleted
        assert client.closed
