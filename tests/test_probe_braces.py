from tests.unit.test_generate_playlist_use_case import *  # noqa
