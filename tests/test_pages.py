"""Tests for the editor page list."""

from utils.pages import list_pages


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text('<html></html>')


def test_lists_matching_pages(root, root_dir):
    _touch(root_dir / 'my-pages' / 'about.html')
    _touch(root_dir / 'demo' / 'landing' / 'index.html')
    _touch(root_dir / 'demo' / 'blog.html')
    _touch(root_dir / 'media' / 'page.html')

    pages = list_pages(root)

    assert [page['file'] for page in pages] == [
        'my-pages/about.html',
        'demo/blog.html',
        'demo/landing/index.html',
    ]
    assert pages[0] == {
        'name': 'about',
        'file': 'my-pages/about.html',
        'title': 'About',
        'url': 'my-pages/about.html',
        'folder': 'my-pages',
    }


def test_index_pages_named_after_subfolder(root, root_dir):
    _touch(root_dir / 'demo' / 'landing' / 'index.html')
    page = list_pages(root)[0]
    assert page['name'] == 'landing'
    assert page['title'] == 'Landing'
    assert page['folder'] == 'demo'


def test_templates_excluded(root, root_dir):
    _touch(root_dir / 'my-pages' / 'new-page-blank-template.html')
    _touch(root_dir / 'demo' / 'editor.html')
    assert list_pages(root) == []


def test_links_outside_root_ignored(root, root_dir, tmp_path):
    outside = tmp_path / 'outside'
    _touch(outside / 'stolen.html')
    (root_dir / 'my-pages').mkdir()
    (root_dir / 'my-pages' / 'stolen.html').symlink_to(outside / 'stolen.html')

    assert list_pages(root) == []


def test_missing_folders(root):
    assert list_pages(root) == []
