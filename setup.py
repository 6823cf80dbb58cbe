import os.path
from setuptools import setup, find_packages


def get_version():
    with open(os.path.join("bwaggregator", "__init__.py")) as f:
        for line in f:
            if "__version__" in line.strip():
                version = line.split("=", 1)[1].strip().strip('"')
                return version


__version__ = get_version()
__license__ = 'GPL'
__copyright__ = ''


setup(name='bwaggregator',
      version=__version__,
      description='Tor bandwidth measurement aggregator',
      long_description=__doc__,
      keywords=['python', 'twisted', 'tor', 'metrics', 'v3bw'],
      install_requires=open('requirements.txt').readlines(),
      classifiers=[
        'Framework :: Twisted',
        'Development Status :: 3 - Alpha',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License (GPL)',
        'Natural Language :: English',
        'Operating System :: POSIX',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Networking',
        'Topic :: Internet',
        'Topic :: Security',
        'Topic :: Utilities'],
      license=__license__,
      packages=find_packages(exclude=['test', 'test.*']),
      package_data={'bwaggregator': ['data/config.ini']},
      extras_require={
        'dev': ['ipython', 'pyflakes', 'pep8'],
        'test': ['tox', 'pytest'],
        'doc': ['sphinx', 'pylint']
      },
      python_requires=">=3.6",
      entry_points={
        "console_scripts": [
            'bwaggregate = bwaggregator.cli:start',
        ]},
     )
