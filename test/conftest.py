from mpnewton.numeric import BigFloat, RoundingMode

import pytest


@pytest.fixture(scope='session')
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def rnd():
    return RoundingMode.NEAREST


@pytest.fixture
def big():
    def make(value, prec: int = 128) -> BigFloat:
        return BigFloat(prec, value)
    return make


@pytest.fixture(scope='session')
def circle_parabola_root():
    """The root of x^2 + y^2 = 4, x^2 = y + 1 in the positive quadrant, at 256 bits.

    y^2 + y - 3 = 0 gives y = (sqrt(13) - 1)/2, and x = sqrt(y + 1).
    """
    rnd = RoundingMode.NEAREST
    y = BigFloat.from_int(13, 256).sqrt(rnd).sub_int(1, rnd).div(BigFloat.from_int(2, 256), rnd)
    x = y.add_int(1, rnd).sqrt(rnd)
    return [x, y]
