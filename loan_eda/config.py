from dataclasses import dataclass, field

@dataclass
class Config:
    # Input
    data_path: str = 'data/raw/application_train.csv'
    cache_dir: str = 'cache'  # under out_dir, keyed per CSV file
    target_col: str = 'TARGET'
    id_col: str = 'SK_ID_CURR'

    # Summary stage
    summary_rows: int = 20  # rows shown in the summary table
    missing_top_n: int = 40

    # Quality checks
    outlier_quantile: float = 0.99
    quantile_interpolation: str = 'linear'
    income_col: str = 'AMT_INCOME_TOTAL'
    credit_col: str = 'AMT_CREDIT'
    employed_col: str = 'DAYS_EMPLOYED'

    # Bivariate
    birth_col: str = 'DAYS_BIRTH'
    score_col: str = 'EXT_SOURCE_2'
    category_col: str = 'OCCUPATION_TYPE'
    category_min_count: int = 100

    box_features: list = field(default_factory=lambda: [
        'AMT_INCOME_TOTAL',
        'AMT_CREDIT',
    ])

    density_features: list = field(default_factory=lambda: [
        'EXT_SOURCE_2',
        'AGE_YEARS',  # derived from DAYS_BIRTH
    ])

    # Output
    out_dir: str = 'reports'
    dpi: int = 150

    def required_columns(self) -> list[str]:
        cols = [
            self.target_col,
            self.income_col,
            self.credit_col,
            self.score_col,
            self.birth_col,
            self.employed_col,
            self.category_col,
        ]
        return list(dict.fromkeys(cols))
