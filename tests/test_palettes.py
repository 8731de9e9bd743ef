import palettes


def test_default_preset_is_alternating():
    assert palettes.resolve(None).id == "alternating"
    assert palettes.resolve("   ").id == "alternating"
    assert palettes.DEFAULT_PALETTE == ("#F01840", "#402848", "#C01830", "#705E74", "#901226")


def test_resolve_is_case_and_whitespace_insensitive():
    preset = palettes.resolve("  Purples_B ")
    assert preset.id == "purples_b"
    assert preset.accent_border == "#C01830"
    assert preset.accent_color is None


def test_unknown_palette_falls_back_to_default():
    assert palettes.resolve("neon").id == palettes.DEFAULT_PRESET


def test_reds_a_is_alias_of_reds():
    assert palettes.resolve("reds_a").colors == palettes.resolve("reds").colors


def test_get_palette_by_name():
    assert palettes.get_palette_by_name(None) is None
    assert palettes.get_palette_by_name("") is None
    assert palettes.get_palette_by_name("purples_c") == ["#705E74", "#402848", "#2A1C30"]


def test_palette_info_lists_presets_without_alias():
    ids = [p["id"] for p in palettes.palette_info()]
    assert "reds_a" not in ids
    assert ids[0] == "alternating"
    assert {"alternating_b", "reds", "reds_b", "purples_a", "purples_b", "purples_c"} <= set(ids)
    for info in palettes.palette_info():
        assert info["colors"]
        assert isinstance(info["colors"], list)
