"""
Tests for the JSON file storages and the provider registry.
"""

import json

import pytest

from playground.models.profile import ModelParams, PlaygroundSettings
from playground.models.provider import Model
from playground.providers.registry import ProviderRegistry
from playground.services.profiles import ProfileManager
from playground.storage import CredentialStorage, ProfileStorage, SettingsStorage, StarredStorage
from playground.utils.custom_exceptions import ValidationError
from playground.utils.obfuscation import deobfuscate, obfuscate


def make_settings(**overrides):
    return PlaygroundSettings(**{"selectedProviderId": "openai", "selectedModelId": "gpt-4o", **overrides})


# ── Provider registry ──────────────────────────────────────────────

class TestProviderRegistry:

    def test_catalog_loaded(self):
        registry = ProviderRegistry()
        ids = [p.id for p in registry.all()]
        assert ids[0] == "openai"
        assert "ollama" in ids
        assert len(ids) == len(set(ids))

    def test_display_names_fall_back_to_raw_id(self):
        registry = ProviderRegistry()
        assert registry.display_name("openai") == "OpenAI"
        assert registry.display_name("retired") == "retired"
        assert registry.model_display_name("openai", "gpt-4o") == "GPT-4o"
        assert registry.model_display_name("openai", "gpt-9") == "gpt-9"

    def test_capability_lists(self):
        registry = ProviderRegistry()
        assert not registry.supports_system_prompt("o1")
        assert not registry.supports_streaming("o1")
        assert registry.supports_streaming("o1-mini")
        assert registry.find_model("openai", "o1").no_system_prompt

    def test_local_provider_needs_no_key(self):
        assert ProviderRegistry().get("ollama").requires_key is False

    def test_anthropic_uses_its_own_auth_header(self):
        anthropic = ProviderRegistry().get("anthropic")
        assert anthropic.auth_header == "x-api-key"
        assert anthropic.auth_prefix == ""

    def test_cached_models_replace_catalog(self):
        registry = ProviderRegistry()
        registry.set_cached_models("openai", [Model(id="gpt-new", name="gpt-new")])
        assert [m.id for m in registry.models_for("openai")] == ["gpt-new"]
        registry.set_cached_models("nobody", [Model(id="x", name="x")])
        assert registry.models_for("nobody") == []

    def test_custom_catalog(self):
        registry = ProviderRegistry([{
            "id": "local", "name": "Local", "base_url": "http://localhost:1/v1",
            "requires_key": False, "models": [{"id": "tiny"}],
        }])
        assert registry.model_display_name("local", "tiny") == "tiny"
        assert registry.get("local").auth_header == "Authorization"


# ── Credentials ────────────────────────────────────────────────────

class TestCredentials:

    def test_obfuscation_round_trip(self):
        secret = "sk-test-ümlaut-123"
        encoded = obfuscate(secret)
        assert secret not in encoded
        assert deobfuscate(encoded) == secret

    def test_deobfuscate_garbage(self):
        assert deobfuscate("%%%not base64") == ""

    def test_save_and_load(self, playground_home):
        storage = CredentialStorage(playground_home)
        storage.save("openai", "  sk-abc  ")
        assert storage.load("openai") == "sk-abc"
        assert storage.has_key("openai")
        assert "sk-abc" not in (playground_home / "credentials.json").read_text()

    def test_missing_key_is_empty(self, playground_home):
        assert CredentialStorage(playground_home).load("openai") == ""

    def test_saving_empty_clears(self, playground_home):
        storage = CredentialStorage(playground_home)
        storage.save("openai", "sk-abc")
        storage.save("openai", "   ")
        assert not storage.has_key("openai")

    def test_configured_providers(self, playground_home):
        storage = CredentialStorage(playground_home)
        storage.save("openai", "a")
        storage.save("groq", "b")
        storage.clear("openai")
        assert storage.configured_providers() == ["groq"]

    def test_persists_across_instances(self, playground_home):
        CredentialStorage(playground_home).save("mistral", "m-key")
        assert CredentialStorage(playground_home).load("mistral") == "m-key"


# ── Settings ───────────────────────────────────────────────────────

class TestSettings:

    def test_defaults_when_missing(self, playground_home):
        settings = SettingsStorage(playground_home).load()
        assert settings.selectedProviderId == "openai"
        assert settings.params.temperature == 0.7
        assert settings.maxToolHops == 8

    def test_round_trip(self, playground_home):
        storage = SettingsStorage(playground_home)
        settings = make_settings(selectedProviderId="groq", selectedModelId="llama3",
                                      enabledToolNames=["calculator"], agenticMode="react")
        storage.save(settings)
        loaded = storage.load()
        assert loaded.selectedProviderId == "groq"
        assert loaded.enabledToolNames == ["calculator"]
        assert loaded.agenticMode == "react"

    def test_partial_file_merged_with_defaults(self, playground_home):
        (playground_home / "settings.json").write_text(json.dumps({"systemPrompt": "Be terse"}))
        loaded = SettingsStorage(playground_home).load()
        assert loaded.systemPrompt == "Be terse"
        assert loaded.selectedModelId == "gpt-4o"

    def test_corrupt_file_gives_defaults(self, playground_home):
        (playground_home / "settings.json").write_text("{broken")
        assert SettingsStorage(playground_home).load().selectedProviderId == "openai"


# ── Starred messages ───────────────────────────────────────────────

class TestStarred:

    def test_star_is_idempotent(self, playground_home):
        storage = StarredStorage(playground_home)
        storage.star("c1", "m1")
        storage.star("c1", "m1")
        assert storage.starred("c1") == ["m1"]

    def test_toggle(self, playground_home):
        storage = StarredStorage(playground_home)
        assert storage.toggle("c1", "m1") is True
        assert storage.is_starred("c1", "m1")
        assert storage.toggle("c1", "m1") is False
        assert storage.starred("c1") == []

    def test_dangling_ids_filtered(self, playground_home):
        storage = StarredStorage(playground_home)
        storage.star("c1", "m1")
        storage.star("c1", "gone")
        assert storage.starred("c1", existing_ids=["m1", "m2"]) == ["m1"]

    def test_forget_conversation(self, playground_home):
        storage = StarredStorage(playground_home)
        storage.star("c1", "m1")
        storage.star("c2", "m2")
        storage.forget_conversation("c1")
        assert storage.starred("c1") == []
        assert storage.starred("c2") == ["m2"]


# ── Profiles ───────────────────────────────────────────────────────

@pytest.fixture
def profiles(playground_home):
    return ProfileManager(ProfileStorage(playground_home), ProviderRegistry())


class TestProfiles:

    def test_save_snapshots_settings(self, profiles):
        settings = make_settings(selectedProviderId="anthropic", selectedModelId="claude-sonnet-4-5",
                                      systemPrompt="You are helpful", params=ModelParams(temperature=0.2))
        profile = profiles.save("  Careful  ", settings)
        assert profile.name == "Careful"
        assert profile.providerId == "anthropic"
        assert profile.params.temperature == 0.2
        assert profiles.get(profile.id) == profile

    def test_blank_name_rejected(self, profiles):
        with pytest.raises(ValidationError):
            profiles.save("   ", make_settings())

    def test_duplicate_names_allowed(self, profiles):
        a = profiles.save("Same", make_settings())
        b = profiles.save("Same", make_settings())
        assert a.id != b.id
        assert len(profiles.list()) == 2

    def test_apply_copies_fields_only(self, profiles):
        saved = profiles.save("Groq", make_settings(selectedProviderId="groq", selectedModelId="mixtral-8x7b-32768"))
        current = make_settings(enabledToolNames=["calculator"], agenticMode="react")
        applied = profiles.apply(saved.id, current)
        assert applied.selectedProviderId == "groq"
        assert applied.enabledToolNames == ["calculator"]
        assert applied.agenticMode == "react"
        assert current.selectedProviderId == "openai"

    def test_apply_missing(self, profiles):
        assert profiles.apply("nope", make_settings()) is None

    def test_delete(self, profiles):
        profile = profiles.save("Temp", make_settings())
        assert profiles.delete(profile.id) is True
        assert profiles.delete(profile.id) is False
        assert profiles.list() == []

    def test_describe_with_retired_model(self, profiles):
        profile = profiles.save("Old", make_settings(selectedProviderId="openai", selectedModelId="gpt-3"))
        assert profiles.describe(profile) == "OpenAI / gpt-3"
