import numpy as np

from heston_process.tests.cases.common import (
    ALL_MODES,
    CaseResult,
    DiscretizationMode,
    is_close,
    make_process,
    standard_normal_draws,
)


def test_reflection_update_restarts_from_absolute_variance() -> CaseResult:
    process = make_process('reflection')
    v0, dt = -0.01, 0.1
    dw0, dw1 = 0.4, 0.9

    s1, v1 = process.evolve(0.0, [100.0, v0], dt, [dw0, dw1])

    vol = np.sqrt(abs(v0))
    nu = 1.0 * (0.04 - vol * vol)
    diffusion = 0.4 * vol * np.sqrt(dt) * (-0.5 * dw0 + np.sqrt(0.75) * dw1)
    from_abs = vol * vol + nu * dt + diffusion
    from_signed = v0 + nu * dt + diffusion

    checks = {
        'variance from |V₀|': is_close(v1, from_abs, rel=1e-13),
        'not from signed V₀': not is_close(v1, from_signed, rel=1e-6),
        'asset': is_close(s1, 100.0 * np.exp(-0.5 * vol * vol * dt
                                             + vol * dw0 * np.sqrt(dt))),
    }
    passed = all(checks.values())
    message = f"V₁={v1:.8f}, |V₀| form={from_abs:.8f}, signed form={from_signed:.8f}"
    return passed, message, {'checks': checks}


def test_truncation_schemes_with_negative_variance() -> CaseResult:
    v0, dt = -0.02, 0.5
    partial = make_process('partial_truncation').evolve(0.0, [100.0, v0], dt, [1.0, 1.0])
    full = make_process('full_truncation').evolve(0.0, [100.0, v0], dt, [1.0, 1.0])

    # vol = 0: asset moves only with rates, variance only with drift
    checks = {
        'partial asset': is_close(partial[0], 100.0),
        'full asset': is_close(full[0], 100.0),
        'partial variance': is_close(partial[1], v0 + 1.0 * (0.04 - v0) * dt),
        'full variance': is_close(full[1], v0 + 1.0 * 0.04 * dt),
    }
    passed = all(checks.values())
    return passed, f"PT V₁={partial[1]:.4f}, FT V₁={full[1]:.4f}", {'checks': checks}


def test_truncation_allows_negative_variance_output() -> CaseResult:
    process = make_process('partial_truncation', sigma=1.0)
    _, v1 = process.evolve(0.0, [100.0, 0.01], 0.5, [0.0, -3.0])

    passed = v1 < 0.0
    return passed, f"V₁ = {v1:.6f}", {}


def test_asset_stays_positive() -> CaseResult:
    draws = standard_normal_draws(200, seed=7) * 3.0
    min_asset = {}
    for mode in ALL_MODES:
        process = make_process(mode, r=0.03, q=0.01)
        lowest = np.inf
        for v0 in (0.0, 0.04, 0.5):
            for dt in (1 / 252, 0.25, 2.0):
                for dw0, dw1 in draws.T[:40]:
                    s1, _ = process.evolve(0.0, [100.0, v0], dt, [dw0, dw1])
                    lowest = min(lowest, s1)
        min_asset[mode.value] = lowest

    passed = all(s > 0.0 for s in min_asset.values())
    message = f"Min S₁ = {min(min_asset.values()):.6f}"
    return passed, message, {'min_asset': min_asset}


def test_zero_step_is_identity() -> CaseResult:
    errors = {}
    for mode in ALL_MODES:
        process = make_process(mode, r=0.05, q=0.02)
        for x0 in ([100.0, 0.04], [57.3, 0.0], [250.0, 0.31]):
            x1 = process.evolve(0.3, x0, 0.0, [1.7, -2.2])
            # Reflection rebuilds V from vol², equal up to rounding
            errors[(mode.value, x0[1])] = float(
                np.max(np.abs(x1 - np.asarray(x0)) / np.abs(np.where(x0, x0, 1.0))))

    passed = all(e <= 1e-14 for e in errors.values())
    message = f"Max relative change = {max(errors.values()):.2e}"
    return passed, message, {'errors': errors}


def test_evolve_returns_new_array_and_leaves_input_untouched() -> CaseResult:
    process = make_process('full_truncation')
    x0 = np.array([100.0, 0.04])
    dw = np.array([0.5, 0.5])
    x1 = process.evolve(0.0, x0, 0.1, dw)

    checks = {
        'new array': x1 is not x0,
        'x0 unchanged': bool(np.array_equal(x0, [100.0, 0.04])),
        'dw unchanged': bool(np.array_equal(dw, [0.5, 0.5])),
    }
    passed = all(checks.values())
    return passed, "inputs unchanged", {'checks': checks}


def test_vectorised_state_matches_scalar_steps() -> CaseResult:
    n = 6
    draws = standard_normal_draws(n, seed=11)
    variances = np.linspace(0.0, 0.2, n)
    x0 = np.vstack([np.full(n, 100.0), variances])

    checks = {}
    for mode in ALL_MODES:
        process = make_process(mode, r=0.02)
        batch = process.evolve(0.0, x0, 0.1, draws)
        singles = np.column_stack([
            process.evolve(0.0, [100.0, variances[i]], 0.1, draws[:, i])
            for i in range(n)
        ])
        checks[mode.value] = batch.shape == (2, n) and is_close(batch, singles)

    passed = all(checks.values())
    return passed, f"{n} states per mode", {'checks': checks}


def test_every_mode_has_a_scheme() -> CaseResult:
    finite = {
        mode.value: bool(np.all(np.isfinite(
            make_process(mode).evolve(0.0, [100.0, 0.04], 0.01, [0.1, 0.2]))))
        for mode in DiscretizationMode
    }
    passed = all(finite.values())
    return passed, f"{len(finite)} modes evolve", {'finite': finite}
