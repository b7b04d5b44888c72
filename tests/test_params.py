import pytest

from imagegen.capabilities import SDXL_VERSION
from imagegen.errors import InvalidDimensionsError, InvalidRequestError, MissingCredentialError
from imagegen.providers.base import ProviderFamily
from imagegen.schemas import GenerateRequest
from imagegen.services.params import normalize_request


def make_request(**overrides):
    data = {"prompt": "a cat", "provider": "openai", "width": 1024, "height": 1024}
    data.update(overrides)
    return GenerateRequest(**data)


@pytest.mark.parametrize("missing", ["prompt", "provider", "width", "height"])
def test_missing_required_field(settings, missing):
    with pytest.raises(InvalidRequestError) as exc:
        normalize_request(make_request(**{missing: None}), {}, settings)
    assert exc.value.message == "Missing required generation parameters."


def test_blank_prompt_rejected(settings):
    with pytest.raises(InvalidRequestError):
        normalize_request(make_request(prompt="   "), {}, settings)


def test_unsupported_provider(settings):
    with pytest.raises(InvalidRequestError) as exc:
        normalize_request(make_request(provider="midjourney"), {}, settings)
    assert "not supported" in exc.value.message


def test_openai_user_key_overrides_env(settings):
    params = normalize_request(make_request(), {"x-openai-api-key": "sk-user"}, settings)
    assert params.api_key == "sk-user"
    assert params.route.family is ProviderFamily.OPENAI
    assert params.route.model == "gpt-image-1"


def test_openai_missing_key_is_user_error(settings):
    settings.OPENAI_API_KEY = ""
    with pytest.raises(MissingCredentialError) as exc:
        normalize_request(make_request(), {}, settings)
    assert exc.value.status_code == 400
    assert "Settings" in exc.value.message


def test_replicate_missing_token_is_server_error(settings):
    settings.REPLICATE_API_TOKEN = ""
    with pytest.raises(MissingCredentialError) as exc:
        normalize_request(make_request(provider="acme/model"), {}, settings)
    assert exc.value.status_code == 500
    assert "REPLICATE_API_TOKEN" in exc.value.message


def test_together_free_prefers_server_key(settings):
    params = normalize_request(
        make_request(provider="togetherai"), {"x-togetherai-api-key": "user"}, settings
    )
    assert params.api_key == "together-server"

    settings.TOGETHER_API_KEY = ""
    params = normalize_request(
        make_request(provider="togetherai"), {"x-togetherai-api-key": "user"}, settings
    )
    assert params.api_key == "user"


def test_together_paid_model_requires_user_key(settings):
    req = make_request(provider="black-forest-labs/FLUX.1.1-pro")
    with pytest.raises(MissingCredentialError) as exc:
        normalize_request(req, {}, settings)
    assert exc.value.status_code == 400

    params = normalize_request(req, {"x-togetherai-api-key": "user"}, settings)
    assert params.route.family is ProviderFamily.TOGETHER
    assert params.api_key == "user"


def test_replicate_prefix_is_stripped(settings):
    params = normalize_request(make_request(provider="replicate/" + SDXL_VERSION), {}, settings)
    assert params.route.family is ProviderFamily.REPLICATE
    assert params.route.model == SDXL_VERSION
    assert params.api_key == "r8-server"


def test_style_suffix_appended(settings):
    params = normalize_request(make_request(style="cinematic"), {}, settings)
    assert params.prompt.endswith(", cinematic style")
    assert params.style == "cinematic"


def test_unsupported_fields_dropped(settings):
    req = make_request(negativePrompt="blurry", steps=30, guidanceScale=7.5, numOutputs=3)
    params = normalize_request(req, {}, settings)
    assert params.negative_prompt is None
    assert params.steps is None
    assert params.guidance_scale is None
    assert params.num_outputs == 1


def test_steps_clamped_to_capability_range(settings):
    params = normalize_request(make_request(provider="togetherai", steps=50), {}, settings)
    assert params.steps == 4


def test_dimensions_checked_before_network(settings):
    with pytest.raises(InvalidDimensionsError):
        normalize_request(make_request(width=512, height=512), {}, settings)


def test_generic_model_keeps_parameters(settings):
    req = make_request(
        provider="acme/custom", width=1024, height=1792, negativePrompt="blurry",
        steps=30, guidanceScale=7.5, seed=42, numOutputs=2,
    )
    params = normalize_request(req, {}, settings)
    assert (params.width, params.height) == (1024, 1792)
    assert params.negative_prompt == "blurry"
    assert params.steps == 30
    assert params.guidance_scale == 7.5
    assert params.seed == 42
    assert params.num_outputs == 2


@pytest.mark.parametrize("provider", ["black-forest-labs/FLUX.1.1-pro", "acme/custom"])
def test_generic_dimensions_enforced(settings, provider):
    req = make_request(provider=provider, width=7, height=3)
    with pytest.raises(InvalidDimensionsError) as exc:
        normalize_request(req, {"x-togetherai-api-key": "user-key"}, settings)
    assert "7x3" in exc.value.message
