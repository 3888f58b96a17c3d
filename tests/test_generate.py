import pytest

from retrosfx.codec import dumps
from retrosfx.errors import InvalidConfigError
from retrosfx.generate import PRESETS, generate, generation_snippet, mutate
from retrosfx.params import GENERATED_FIELDS, default_params, in_domain, out_of_domain, to_f32
from retrosfx.prng import Prng


@pytest.mark.parametrize("preset", PRESETS)
def test_generate_is_deterministic(preset: str) -> None:
    for seed in (0, 1, 17, 2**63 + 11):
        first = generate(preset, 3, seed)  # type: ignore[arg-type]
        second = generate(preset, 3, seed)  # type: ignore[arg-type]
        assert first == second
        assert dumps(first) == dumps(second)


@pytest.mark.parametrize("preset", PRESETS)
def test_generated_fields_stay_in_domain(preset: str) -> None:
    for seed in range(40):
        for mutations in (0, 1, 6):
            params = generate(preset, mutations, seed)  # type: ignore[arg-type]
            assert out_of_domain(params) == [], (preset, seed, mutations)


@pytest.mark.parametrize("preset", PRESETS)
def test_seeds_vary_the_sound(preset: str) -> None:
    sounds = {dumps(generate(preset, 0, seed)) for seed in range(1, 11)}  # type: ignore[arg-type]
    assert len(sounds) > 1


def test_seed_zero_matches_seed_one() -> None:
    assert generate("random", 0, 0) == generate("random", 0, 1)


def test_laser_shape() -> None:
    params = generate("laser", 0, 17)
    assert params.wave_type in ("square", "sawtooth", "sine")
    assert params.env_attack == 0.0
    assert params.base_freq >= to_f32(0.3)
    assert params.freq_ramp <= to_f32(-0.15)
    assert params.freq_limit >= 0.0


def test_preset_signatures() -> None:
    for seed in range(1, 30):
        assert generate("explosion", 0, seed).wave_type == "noise"
        assert generate("pickup", 0, seed).wave_type == "square"
        assert generate("jump", 0, seed).wave_type == "square"
        assert generate("hit", 0, seed).wave_type in ("square", "sawtooth", "noise")
        assert generate("powerup", 0, seed).wave_type in ("square", "sawtooth")

        blip = generate("blip", 0, seed)
        assert blip.wave_type in ("square", "sawtooth")
        assert blip.hpf_freq == to_f32(0.1)

        pickup = generate("pickup", 0, seed)
        assert to_f32(0.4) <= pickup.base_freq <= 0.9 + 1e-6
        assert pickup.env_punch >= to_f32(0.3)


def test_mutations_change_the_sound() -> None:
    assert generate("pickup", 0, 5) != generate("pickup", 5, 5)


def test_mutation_steps_are_small() -> None:
    params = default_params()
    params.duty = 0.5
    params.freq_ramp = 0.0
    before = params.model_copy()

    mutate(params, Prng(3))

    for name in GENERATED_FIELDS:
        moved = abs(getattr(params, name) - getattr(before, name))
        assert moved <= 0.05 + 1e-6, name
    assert in_domain(params)


def test_mutation_draws_one_or_two_values_per_field() -> None:
    prng = Prng(21)
    mirror = prng.copy()
    mutate(default_params(), prng)

    expected = 0
    for _ in GENERATED_FIELDS:
        expected += 1
        if mirror.next_uint(1):
            mirror.next_float(0.1)
            expected += 1
    assert mirror.state == prng.state
    assert 21 <= expected <= 42


def test_unknown_preset_rejected() -> None:
    with pytest.raises(InvalidConfigError):
        generate("coin", 0, 1)  # type: ignore[arg-type]


def test_negative_mutations_rejected() -> None:
    with pytest.raises(InvalidConfigError):
        generate("laser", -1, 1)


def test_generation_snippet() -> None:
    snippet = generation_snippet("laser", 2, 17)
    assert snippet == "params = retrosfx.generate('laser', mutations=2, seed=17)"
    with pytest.raises(InvalidConfigError):
        generation_snippet("coin", 0, 1)  # type: ignore[arg-type]
