from setuptools import find_packages, setup

setup(
    name='cluster-jobrunner',
    version='1.0.0',
    description='Batch scheduler job dispatch with file-based status tracking',
    python_requires='>=3.8',
    packages=find_packages(exclude=[
        'clusterrunner.test',
        'clusterrunner.test.*',
    ]),
    install_requires=[
        'chardet',
        'python-dateutil',
        'simplejson',
        'six',
    ],
    extras_require={
        'test': [
            'mock',
            'pytest',
        ],
    },
    entry_points={
        "console_scripts": [
            "clusterjob = clusterrunner.main:main",
        ],
    }
)
