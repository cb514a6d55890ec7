from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

import careshare
from careshare.database.config import Base


@pytest.fixture
def alembic_config(tmp_path):
    config = Config()
    config.set_main_option("script_location", str(Path(careshare.__file__).parent / "alembic"))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{tmp_path / 'careshare.db'}")
    return config


def table_names(config):
    engine = create_engine(config.get_main_option("sqlalchemy.url"))
    try:
        return set(inspect(engine).get_table_names()) - {"alembic_version"}
    finally:
        engine.dispose()


def test_upgrade_creates_every_model_table(alembic_config):
    command.upgrade(alembic_config, "head")

    assert table_names(alembic_config) == set(Base.metadata.tables)


def test_downgrade_drops_everything(alembic_config):
    command.upgrade(alembic_config, "head")
    command.downgrade(alembic_config, "base")

    assert table_names(alembic_config) == set()
