import retrosfx


def test_public_api_reexports() -> None:
    for name in retrosfx.__all__:
        assert hasattr(retrosfx, name), name


def test_top_level_workflow() -> None:
    params = retrosfx.generate("pickup", mutations=1, seed=3)
    restored = retrosfx.loads(retrosfx.dumps(params)).unwrap()
    assert restored == params
    assert retrosfx.render(restored, seed=3).size > 0
