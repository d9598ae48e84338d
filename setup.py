from setuptools import setup

setup(name='simplebag',
      version='1.0.1',
      description="simplebag: a Python implementation for creating and validating BagIt (v0.97) bags",
      url='https://github.com/simplebag/simplebag',
      packages=['simplebag', 'simplebag.access', 'simplebag.validate'],
      python_requires='>=3.8',
      install_requires=[
          'fs>=2.4',
          # fs imports pkg_resources, which setuptools 81 removes
          'setuptools<81',
          'click>=7.0',
      ],
      extras_require={
          'test': ['bagit>=1.8'],
      },
      entry_points={
          'console_scripts': ['simplebag=simplebag.cli:main'],
      },
      test_suite="tests.suite",
      test_runner="unittest:TextTestRunner"
)
