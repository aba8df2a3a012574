"""Tests for path sanitization and root containment."""

import pytest

from utils.errors import DisallowedName, EmptyPath, PathError, PathEscapesRoot
from utils.safe_path import Root, force_suffix, sanitize_filename, sanitize_path


class TestTraversal:
    """Inputs that try to leave the editor root."""

    def test_parent_traversal_blocked(self, root):
        with pytest.raises(PathEscapesRoot):
            sanitize_path('../../etc/passwd', root)

    @pytest.mark.parametrize('raw', [
        '../page.html',
        'pages/../../page.html',
        'pages/../page.html',
        '..\\..\\windows\\win.ini',
        'pages/.../page.html',
        '..',
        '/etc/hosts',
        '//etc/hosts',
        '\\etc\\hosts',
        'C:\\Windows\\system.ini',
        'c:/page.html',
    ])
    def test_traversal_and_absolute_paths(self, root, raw):
        with pytest.raises(PathEscapesRoot):
            sanitize_path(raw, root)

    @pytest.mark.parametrize('raw', [
        'a/. ./x.html',
        'a/.%./x.html',
        'a/.<./x.html',
        '. ./x.html',
        'a\\.\t.\\x.html',
    ])
    def test_filtered_characters_cannot_form_parent_segment(self, root, raw):
        with pytest.raises(PathEscapesRoot):
            sanitize_path(raw, root)

    def test_escape_error_is_value_error(self, root):
        with pytest.raises(ValueError):
            sanitize_path('../x.html', root)

    def test_symlinked_directory_escape(self, root, root_dir, tmp_path):
        outside = tmp_path / 'outside'
        outside.mkdir()
        (root_dir / 'link').symlink_to(outside, target_is_directory=True)

        with pytest.raises(PathEscapesRoot):
            sanitize_path('link/page.html', root)

    def test_symlinked_file_escape(self, root, root_dir, tmp_path):
        secret = tmp_path / 'secret.html'
        secret.write_text('secret')
        (root_dir / 'page.html').symlink_to(secret)

        with pytest.raises(PathEscapesRoot):
            sanitize_path('page.html', root)

    def test_symlink_inside_root_allowed(self, root, root_dir):
        (root_dir / 'real').mkdir()
        (root_dir / 'alias').symlink_to(root_dir / 'real', target_is_directory=True)

        result = sanitize_path('alias/page.html', root)
        assert result.path == root_dir.resolve() / 'real' / 'page.html'
        assert result.relative == 'alias/page.html'

    def test_encoded_traversal_is_filtered(self, root, root_dir):
        result = sanitize_path('%2e%2e%2fpage.html', root)
        assert result.path.parent == root_dir.resolve()
        assert result.relative == '2e2e2fpage.html'


class TestSanitizePath:
    """Tests for successful sanitization."""

    def test_simple_relative_path(self, root, root_dir):
        result = sanitize_path('my-pages/about.html', root)
        assert result.relative == 'my-pages/about.html'
        assert result.path == root_dir.resolve() / 'my-pages' / 'about.html'
        assert result.root == root

    def test_query_string_stripped(self, root):
        assert sanitize_path('demo/page.html?v=2&x=../../', root).relative == 'demo/page.html'

    def test_backslashes_and_repeated_separators(self, root):
        assert sanitize_path('my-pages\\\\sub//page.html', root).relative == 'my-pages/sub/page.html'

    def test_invalid_characters_dropped(self, root):
        assert sanitize_path('my pages/ab<c>"$.html', root).relative == 'mypages/abc.html'

    def test_multi_dots_inside_names_removed(self, root):
        assert sanitize_path('my..page.html', root).relative == 'mypage.html'

    def test_dot_segments_collapsed(self, root):
        assert sanitize_path('./pages/./page.html', root).relative == 'pages/page.html'

    def test_trailing_slash_directory(self, root, root_dir):
        result = sanitize_path('media/', root)
        assert result.relative == 'media'
        assert result.path == root_dir.resolve() / 'media'

    def test_root_reference(self, root, root_dir):
        result = sanitize_path('.', root)
        assert result.is_root
        assert result.relative == ''
        assert result.path == root_dir.resolve()

    @pytest.mark.parametrize('raw', [
        'my-pages/about.html',
        'demo/page.html?v=1',
        'my pages//sub\\page.html',
        './media/',
        'a..b/c.html',
        'a/x. .y.html',
        'a/.%.b.html',
    ])
    def test_idempotent(self, root, raw):
        first = sanitize_path(raw, root)
        second = sanitize_path(first.relative, root)
        assert second.path == first.path
        assert second.relative == first.relative

    def test_idempotent_with_forced_extension(self, root):
        first = sanitize_path('pages/about.php', root, force_extension='html')
        second = sanitize_path(first.relative, root, force_extension='html')
        assert second == first

    def test_child(self, root, root_dir):
        media = sanitize_path('media', root)
        child = media.child('logo.png')
        assert child.relative == 'media/logo.png'
        assert child.path == root_dir.resolve() / 'media' / 'logo.png'


class TestForcedExtension:
    """Tests for extension forcing on saved pages."""

    def test_existing_extension_replaced(self, root):
        result = sanitize_path('pages/about.php', root, force_extension='html')
        assert result.relative == 'pages/about.html'
        assert result.path.suffix == '.html'

    def test_missing_extension_added(self, root):
        assert sanitize_path('pages/about', root, force_extension='html').relative == 'pages/about.html'

    def test_only_basename_is_touched(self, root):
        assert sanitize_path('my.dir/page', root, force_extension='html').relative == 'my.dir/page.html'

    def test_root_cannot_take_extension(self, root):
        with pytest.raises(EmptyPath):
            sanitize_path('.', root, force_extension='html')

    def test_force_suffix_helper(self):
        assert force_suffix('a/b.tar.gz', '.html') == 'a/b.tar.html'
        assert force_suffix('index', 'html') == 'index.html'


class TestRejectedNames:
    """Tests for empty and denylisted inputs."""

    @pytest.mark.parametrize('raw', ['', '?v=1', '@@@', '   '])
    def test_empty(self, root, raw):
        with pytest.raises(EmptyPath):
            sanitize_path(raw, root)

    def test_non_string(self, root):
        with pytest.raises(EmptyPath):
            sanitize_path(None, root)

    @pytest.mark.parametrize('raw', [
        '.htaccess',
        'uploads/.htaccess',
        'passwd',
        'etc/PASSWD',
        '.htaccess?download=1',
        'pages/pass wd',
    ])
    def test_disallowed_names(self, root, raw):
        with pytest.raises(DisallowedName):
            sanitize_path(raw, root)

    def test_all_errors_are_path_errors(self, root):
        for raw in ('', '../x', 'passwd'):
            with pytest.raises(PathError):
                sanitize_path(raw, root)


class TestSanitizeFilename:
    """Tests for bare upload filenames."""

    def test_directories_discarded(self):
        assert sanitize_filename('../../evil.png') == 'evil.png'
        assert sanitize_filename('C:\\Users\\me\\photo.jpg') == 'photo.jpg'

    def test_characters_filtered(self):
        assert sanitize_filename('my photo (1).png') == 'myphoto1.png'

    def test_hidden_prefix_removed(self):
        assert sanitize_filename('.hidden.png') == 'hidden.png'

    def test_query_suffix_removed(self):
        assert sanitize_filename('logo.png?raw=1') == 'logo.png'

    @pytest.mark.parametrize('name,expected', [
        ('x. .png', 'xpng'),
        ('a.%.b.png', 'ab.png'),
        ('my..logo.png', 'mylogo.png'),
    ])
    def test_dots_joined_by_filtering_are_removed(self, root, name, expected):
        cleaned = sanitize_filename(name)
        assert cleaned == expected
        assert sanitize_path(f'media/{cleaned}', root).relative == f'media/{cleaned}'

    @pytest.mark.parametrize('name', ['', '???', '...', '@@', '. .'])
    def test_empty(self, name):
        with pytest.raises(EmptyPath):
            sanitize_filename(name)

    @pytest.mark.parametrize('name', ['passwd', 'media/.htaccess'])
    def test_disallowed(self, name):
        with pytest.raises(DisallowedName):
            sanitize_filename(name)


def test_root_is_canonical(tmp_path):
    (tmp_path / 'real').mkdir()
    (tmp_path / 'alias').symlink_to(tmp_path / 'real', target_is_directory=True)

    root = Root.at(tmp_path / 'alias')
    assert root.path == (tmp_path / 'real').resolve()
    assert root.contains(root.path / 'x' / 'y')
    assert not root.contains(tmp_path.resolve())
