"""Shared pytest fixtures for phpscope tests."""

import pytest
from dotenv import load_dotenv
from hypothesis import settings

from phpscope.broker import Broker
from phpscope.core.config import ScopeConfig

# Load environment variables from .env file
load_dotenv()

# Configure hypothesis for property-based testing
settings.register_profile("ci", max_examples=100, deadline=None)
settings.register_profile("dev", max_examples=20, deadline=None)
settings.load_profile("dev")


@pytest.fixture
def config() -> ScopeConfig:
    """Provide settings that ignore any local .env file."""
    return ScopeConfig(_env_file=None)


@pytest.fixture
def broker(config) -> Broker:
    """Provide an empty broker."""
    return Broker(config)


@pytest.fixture
def process(broker):
    """Process PHP source text with the shared broker.

    Returns a callable taking the source and an optional file name.
    """
    counter = {"files": 0}

    def _process(source: str, file_name: str | None = None):
        counter["files"] += 1
        return broker.process_string(source, file_name or f"file{counter['files']}.php")

    return _process


@pytest.fixture
def sample_project(tmp_path):
    """Provide a small PHP project on disk."""
    src = tmp_path / "src"
    (src / "Model").mkdir(parents=True)
    (src / "vendor" / "lib").mkdir(parents=True)

    (src / "Model" / "User.php").write_text(
        """<?php
namespace App\\Model;

/**
 * A registered user.
 */
class User extends Entity implements \\Countable
{
    use Timestamps;

    const ROLE = 'user';

    private $name = 'anonymous';

    public function count(): int
    {
        return 1;
    }
}
""",
        encoding="utf-8",
    )
    (src / "Model" / "Entity.php").write_text(
        """<?php
namespace App\\Model;

abstract class Entity
{
    protected $id;

    abstract public function count(): int;
}

trait Timestamps
{
    public $createdAt;

    public function touch()
    {
    }
}
""",
        encoding="utf-8",
    )
    (src / "functions.php").write_text(
        """<?php
namespace App;

const VERSION = '1.0';

function helper($value = VERSION)
{
    return $value;
}
""",
        encoding="utf-8",
    )
    (src / "vendor" / "lib" / "Ignored.php").write_text(
        "<?php\nclass Ignored {}\n",
        encoding="utf-8",
    )
    (src / "README.txt").write_text("not php", encoding="utf-8")
    return src
