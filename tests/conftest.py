import os
import sys

import pytest

# Ensure the project root is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tests.helpers import write_variant  # noqa: E402

CREDITS_CSV = """path,authors,licenses,urls
body/bodies,bluecarrot16; Stephen Challener,CC-BY-SA 3.0; GPL 3.0,https://opengameart.org/content/lpc-character-bases
head/heads,bluecarrot16,CC-BY-SA 3.0,https://opengameart.org/content/lpc-heads
facial/glasses,Bluecarrot16,CC-BY-SA 3.0,https://opengameart.org/content/lpc-glasses
legs,Johannes Sjolund,CC-BY-SA 3.0,
"""


@pytest.fixture(scope="session")
def asset_root(tmp_path_factory):
    """Small spritesheet tree covering every slot.

    The feet layer has no jump animation.
    """
    root = tmp_path_factory.mktemp("spritesheets")
    for bucket in ("male", "female"):
        for color in ("light", "tan"):
            write_variant(root, "body/bodies", "body", bucket, color, "body")
            write_variant(root, "head/heads", "human", bucket, color, "head")
    write_variant(root, "legs", "pants", "universal", "black", "legs")
    write_variant(root, "feet", "shoes", "universal", "brown", "feet", skip=["jump"])
    write_variant(root, "torso/clothes", "shirt", "universal", "white", "torso")
    write_variant(root, "hair", "bob", "universal", "blonde", "hair")
    write_variant(root, "facial", "glasses", "universal", "black", "facial")
    (root / "credits.csv").write_text(CREDITS_CSV, encoding="utf-8")
    return root


@pytest.fixture(scope="session")
def catalog(asset_root):
    from catalog import AssetCatalog

    return AssetCatalog.from_directory(asset_root)
