import asyncio

from tequilas.services.storage import LocalImageStorage

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def test_stored_names_cannot_escape_the_image_root(tmp_path):
    storage = LocalImageStorage(root=tmp_path / "images", url_prefix="/images")

    stored = asyncio.run(storage.save("../../etc/évil name.png", PNG))

    assert stored.filename.endswith("_etc_evil_name.png")
    assert stored.url == f"/images/{stored.filename}"
    assert (tmp_path / "images" / stored.filename).read_bytes() == PNG
    assert [p.name for p in tmp_path.iterdir()] == ["images"]


def test_delete_ignores_foreign_urls(tmp_path):
    storage = LocalImageStorage(root=tmp_path, url_prefix="/images")
    stored = asyncio.run(storage.save("pizza.png", PNG))

    assert asyncio.run(storage.delete("/images/../secret.png")) is False
    assert asyncio.run(storage.delete("/uploads/pizza.png")) is False
    assert asyncio.run(storage.delete(stored.url)) is True
    assert not (tmp_path / stored.filename).exists()
