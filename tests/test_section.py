"""
Section Binding Tests

Tests for SectionContent: initial load, default merging, saving and
following cmsUpdate notifications.
"""

from unittest.mock import MagicMock

import pytest

from sitecms.client import CMSConnectionError, CMSSaveError, SectionContent
from sitecms.client.broadcaster import ContentUpdate
from sitecms.client.cache_store import write_entry


DEFAULTS = {'title': 'Clean Energy', 'subtitle': 'Vertical-axis turbines'}


def ok_section(data, updated_at='2024-01-01T00:00:00.000Z'):
    return {'success': True, 'data': data, 'updatedAt': updated_at}


class TestLoad:
    """Loading section content."""

    def test_auto_fetch_loads_on_creation(self, coordinator, mock_api):
        mock_api.get_section.return_value = ok_section({'title': 'Stored'})

        hero = SectionContent(coordinator, 'home', 'hero', default_value=DEFAULTS)

        assert hero.loading is False
        assert hero.data == {'title': 'Stored', 'subtitle': 'Vertical-axis turbines'}
        assert hero.updated_at == '2024-01-01T00:00:00.000Z'

    def test_without_auto_fetch_shows_defaults(self, coordinator, mock_api):
        hero = SectionContent(coordinator, 'home', 'hero', default_value=DEFAULTS, auto_fetch=False)

        assert hero.data == DEFAULTS
        assert hero.updated_at is None
        mock_api.get_section.assert_not_called()

    def test_load_falls_back_to_defaults(self, coordinator, mock_api):
        mock_api.get_section.side_effect = CMSConnectionError('down')

        hero = SectionContent(coordinator, 'home', 'hero', default_value=DEFAULTS)

        assert hero.data == DEFAULTS
        assert hero.error is None

    def test_non_dict_defaults_are_not_merged(self, coordinator, mock_api):
        mock_api.get_section.return_value = ok_section({'title': 'Stored'})

        hero = SectionContent(coordinator, 'home', 'hero', default_value='fallback')

        assert hero.data == {'title': 'Stored'}

    def test_refresh_contacts_store(self, coordinator, mock_api, cache):
        write_entry(cache, 'cms_home_hero', {'title': 'Cached'}, '2023-01-01T00:00:00Z')
        hero = SectionContent(coordinator, 'home', 'hero', auto_fetch=False)
        mock_api.get_section.return_value = ok_section({'title': 'Fresh'})

        assert hero.refresh() == {'title': 'Fresh'}
        mock_api.get_section.assert_called_once_with('home', 'hero')

    def test_load_from_cache_only(self, coordinator, mock_api, cache):
        write_entry(cache, 'cms_home_hero', {'title': 'Cached'}, '2023-01-01T00:00:00Z')
        hero = SectionContent(coordinator, 'home', 'hero', auto_fetch=False)

        assert hero.load(skip_cache=True) == {'title': 'Cached'}
        mock_api.get_section.assert_not_called()

    def test_on_update_called_after_load(self, coordinator, mock_api):
        mock_api.get_section.return_value = ok_section({'title': 'Stored'})
        callback = MagicMock()

        SectionContent(coordinator, 'home', 'hero', on_update=callback)

        callback.assert_called_once_with({'title': 'Stored'})


class TestSave:
    """Saving through the binding."""

    def test_save_merges_changes(self, coordinator, mock_api):
        mock_api.get_section.return_value = ok_section({'title': 'Old', 'subtitle': 'Keep'})
        hero = SectionContent(coordinator, 'home', 'hero')
        mock_api.save_section.side_effect = lambda page, section, data: ok_section(
            data, '2024-02-01T00:00:00.000Z'
        )

        result = hero.save({'title': 'New'})

        mock_api.save_section.assert_called_once_with('home', 'hero', {'title': 'New', 'subtitle': 'Keep'})
        assert result == {'title': 'New', 'subtitle': 'Keep'}
        assert hero.updated_at == '2024-02-01T00:00:00.000Z'
        assert hero.loading is False

    def test_failed_save_keeps_data_and_records_error(self, coordinator, mock_api):
        mock_api.get_section.return_value = ok_section({'title': 'Old'})
        hero = SectionContent(coordinator, 'home', 'hero')
        error = CMSSaveError('Failed to save CMS data: 500', status_code=500)
        mock_api.save_section.side_effect = error

        with pytest.raises(CMSSaveError):
            hero.save({'title': 'New'})

        assert hero.data == {'title': 'Old'}
        assert hero.error is error
        assert hero.loading is False


class TestUpdates:
    """Following cmsUpdate notifications."""

    def test_other_binding_sees_save(self, coordinator, mock_api):
        mock_api.get_section.return_value = ok_section({'title': 'Old'})
        reader = SectionContent(coordinator, 'home', 'hero')
        editor = SectionContent(coordinator, 'home', 'hero')
        mock_api.save_section.return_value = ok_section({'title': 'New'}, '2024-03-01T00:00:00.000Z')

        editor.save({'title': 'New'})

        assert reader.data == {'title': 'New'}
        assert reader.updated_at == '2024-03-01T00:00:00.000Z'

    def test_other_sections_ignored(self, coordinator, mock_api, broadcaster):
        mock_api.get_section.return_value = None
        hero = SectionContent(coordinator, 'home', 'hero', default_value=DEFAULTS)

        broadcaster.publish(ContentUpdate('home', 'stats', {'items': []}))
        broadcaster.publish(ContentUpdate('about', 'hero', {'title': 'About'}))

        assert hero.data == DEFAULTS

    def test_delete_resets_to_defaults(self, coordinator, mock_api, broadcaster):
        mock_api.get_section.return_value = ok_section({'title': 'Stored'})
        hero = SectionContent(coordinator, 'home', 'hero', default_value=DEFAULTS)

        broadcaster.publish(ContentUpdate('home', 'hero'))

        assert hero.data == DEFAULTS

    def test_closed_binding_stops_following(self, coordinator, mock_api, broadcaster):
        mock_api.get_section.return_value = ok_section({'title': 'Stored'})
        callback = MagicMock()

        with SectionContent(coordinator, 'home', 'hero', on_update=callback) as hero:
            pass
        callback.reset_mock()
        broadcaster.publish(ContentUpdate('home', 'hero', {'title': 'Later'}))

        assert hero.closed is True
        assert hero.data == {'title': 'Stored'}
        callback.assert_not_called()
