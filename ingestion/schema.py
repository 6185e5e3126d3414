"""domain_ranking target schema and the CSV header mapping."""

DOMAIN_RANKING_TABLE = "domain_ranking"

DB_COLUMNS = [
    "global_rank",
    "tld_rank",
    "domain",
    "tld",
    "ref_subnets",
    "ref_ips",
    "idn_domain",
    "idn_tld",
    "prev_global_rank",
    "prev_tld_rank",
    "prev_ref_subnets",
    "prev_ref_ips",
]

# Normalized CSV header -> target column. Both the Majestic export spelling
# (GlobalRank, RefSubNets, ...) and snake_case are accepted.
HEADER_TO_COLUMN = {
    "globalrank": "global_rank",
    "global_rank": "global_rank",
    "tldrank": "tld_rank",
    "tld_rank": "tld_rank",
    "domain": "domain",
    "tld": "tld",
    "refsubnets": "ref_subnets",
    "ref_subnets": "ref_subnets",
    "refips": "ref_ips",
    "ref_ips": "ref_ips",
    "idndomain": "idn_domain",
    "idn_domain": "idn_domain",
    "idntld": "idn_tld",
    "idn_tld": "idn_tld",
    "prevglobalrank": "prev_global_rank",
    "prev_global_rank": "prev_global_rank",
    "prevtldrank": "prev_tld_rank",
    "prev_tld_rank": "prev_tld_rank",
    "prevrefsubnets": "prev_ref_subnets",
    "prev_ref_subnets": "prev_ref_subnets",
    "prevrefips": "prev_ref_ips",
    "prev_ref_ips": "prev_ref_ips",
}

DEFAULT_CSV_PATH = "./csv/majestic_million.csv"
DEFAULT_BUFFER_SIZE = 500
