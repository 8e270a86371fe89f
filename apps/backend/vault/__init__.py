"""AssetVault 個人資產庫"""

__version__ = "0.1.0"
