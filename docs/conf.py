# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys
sys.path.insert(0, os.path.abspath('..'))

import hotsplice

# -- Project information -----------------------------------------------------

project = 'hotsplice'
copyright = '2026, hotsplice contributors'
author = 'hotsplice contributors'
release = hotsplice.__version__
version = hotsplice.__version__

# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx.ext.doctest',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'
html_static_path = []

# -- Extension configuration -------------------------------------------------

# Napoleon settings
napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = False
napoleon_include_private_with_doc = False
napoleon_include_special_with_doc = True
napoleon_use_param = True
napoleon_use_rtype = True
napoleon_attr_annotations = True

# Autodoc settings
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'undoc-members': False,
    'exclude-members': '__weakref__,__dataclass_fields__,__dataclass_params__,__match_args__',
}


def skip_dataclass_fields(app, what, name, obj, skip, options):
    """Skip dataclass fields at module level; they are documented on their classes."""
    if what == "attribute":
        if hasattr(obj, '__class__') and hasattr(obj.__class__, '__dataclass_fields__'):
            if 'hotsplice.core' in str(getattr(obj, '__module__', '')):
                return True
    return skip


def setup(app):
    app.connect('autodoc-skip-member', skip_dataclass_fields)


autodoc_typehints = 'description'
autodoc_typehints_description_target = 'documented'

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
}
