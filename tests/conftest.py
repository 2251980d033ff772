"""
Pytest configuration and fixtures for Room Stager tests.
"""
import base64
import io

import pytest
from PIL import Image

from stager.fal_client import reset_credentials
from stager.models.catalog import CatalogItem
from stager.models.room import RoomSpec


@pytest.fixture(autouse=True)
def no_fal_credentials(monkeypatch):
    """Start every test without a fal.ai key; tests that need one set it explicitly."""
    monkeypatch.delenv("FAL_KEY", raising=False)
    monkeypatch.delenv("FAL_API_KEY", raising=False)
    reset_credentials()
    yield
    reset_credentials()


@pytest.fixture
def room():
    return RoomSpec(width=400, length=500, height=250)


@pytest.fixture
def sofa():
    return CatalogItem(id="sofa-1", displayName="Nordic Sofa", category="sofa", width=210, depth=85, height=80)


@pytest.fixture
def sample_items(sofa):
    """A small living room selection, paint included."""
    return [
        sofa,
        CatalogItem(id="table-1", displayName="Oslo Coffee Table", category="table", width=120, depth=60, height=45),
        CatalogItem(id="lamp-1", displayName="Arc Floor Lamp", category="lighting", width=40, depth=40, height=180),
        CatalogItem(id="paint-1", displayName="Sage Green Matt", category="paint",
                    colorName="Sage Green", colorHex="#9caf88"),
    ]


@pytest.fixture
def png_bytes():
    img = Image.new("RGB", (32, 24), color="beige")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_uri(png_bytes):
    return f"data:image/png;base64,{base64.b64encode(png_bytes).decode()}"
