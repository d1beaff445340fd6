from setuptools import find_packages, setup

setup(
  name = 'testsieve',
  packages = find_packages(where='src'),
  package_dir = {'': 'src'},
  version = '1.0.0',
  license='GNU',
  description = 'category-based test selection: decide which tests in a description tree should run',
  keywords = ['testing', 'test-selection', 'categories'],
  python_requires='>=3.11',
  install_requires=[
"pydantic>=2.0",
"pydantic-settings>=2.0",
"PyYAML>=6.0",
"rich>=13.0",
"typer>=0.9",
      ],
  extras_require={
    'test': [
"pytest>=7.0",
"pytest-asyncio>=0.21",
    ],
  },
  entry_points={
    'console_scripts': [
      'testsieve=testsieve.cli.main:run_cli',
    ],
  },
  classifiers=[
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'Topic :: Software Development :: Testing',
    'License :: OSI Approved :: GNU General Public License (GPL)',
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
  ],
)
