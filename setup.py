from setuptools import setup

setup(name='bnrestart',
      version='0.1',
      description='Learn Bayesian network classifier structures with randomly restarted hill climbing',
      license='MIT',
      packages=['bnrestart'],
      python_requires='>=3.7',
      install_requires=[
          'scipy >= 1.0',
          'numpy >= 1.17.0',
          'pandas >= 0.25.0',
          'networkx >= 2.1',
          'matplotlib >= 2.0.2',
          'pyyaml >= 5.1',
          'pgmpy'
      ],
      extras_require={
          'test': ['pytest >= 6.0']
      },
      entry_points={
          'console_scripts': ['bnrestart = bnrestart.cli:main']
      },
      classifiers=[
          "Programming Language :: Python :: 3",
          "Intended Audience :: Developers",
          "Operating System :: Unix",
          "Operating System :: POSIX",
          "Operating System :: Microsoft :: Windows",
          "Operating System :: MacOS",
          "Topic :: Scientific/Engineering"
      ],
      zip_safe=False)
