"""City and region names mapped to their primary airport (IATA) code.

Keys are lower-case. Neighbourhoods and suburbs map to the airport that
serves them.
"""

CITY_TO_IATA: dict[str, str] = {
    # North America
    "new york": "JFK", "new york city": "JFK", "nyc": "JFK", "manhattan": "JFK",
    "brooklyn": "JFK", "queens": "JFK", "bronx": "JFK",
    "los angeles": "LAX", "la": "LAX", "hollywood": "LAX", "santa monica": "LAX",
    "beverly hills": "LAX",
    "chicago": "ORD", "river forest": "ORD", "evanston": "ORD", "oak park": "ORD",
    "naperville": "ORD",
    "san francisco": "SFO", "sf": "SFO", "oakland": "OAK", "san jose": "SJC",
    "miami": "MIA", "miami beach": "MIA", "fort lauderdale": "FLL",
    "boston": "BOS", "cambridge": "BOS", "somerville": "BOS",
    "seattle": "SEA", "bellevue": "SEA", "tacoma": "SEA",
    "washington": "DCA", "dc": "DCA", "washington dc": "DCA", "arlington": "DCA",
    "atlanta": "ATL", "dallas": "DFW", "houston": "IAH", "phoenix": "PHX",
    "philadelphia": "PHL", "las vegas": "LAS", "orlando": "MCO", "denver": "DEN",
    "portland": "PDX", "austin": "AUS", "nashville": "BNA", "new orleans": "MSY",
    # Canada
    "toronto": "YYZ", "mississauga": "YYZ", "scarborough": "YYZ",
    "vancouver": "YVR", "burnaby": "YVR", "richmond": "YVR",
    "montreal": "YUL", "calgary": "YYC", "ottawa": "YOW", "edmonton": "YEG",
    # Mexico
    "mexico city": "MEX", "cancun": "CUN", "guadalajara": "GDL", "monterrey": "MTY",
    # UK & Ireland
    "london": "LHR", "westminster": "LHR", "city of london": "LHR", "heathrow": "LHR",
    "manchester": "MAN", "edinburgh": "EDI", "glasgow": "GLA", "dublin": "DUB",
    # France
    "paris": "CDG", "marseille": "MRS", "lyon": "LYS", "nice": "NCE", "toulouse": "TLS",
    # Germany
    "berlin": "BER", "munich": "MUC", "frankfurt": "FRA", "hamburg": "HAM",
    "cologne": "CGN", "dusseldorf": "DUS",
    # Spain
    "madrid": "MAD", "barcelona": "BCN", "seville": "SVQ", "valencia": "VLC",
    "malaga": "AGP",
    # Italy
    "rome": "FCO", "milan": "MXP", "venice": "VCE", "florence": "FLR",
    "naples": "NAP", "bologna": "BLQ",
    # Rest of Europe
    "amsterdam": "AMS", "rotterdam": "RTM", "brussels": "BRU", "zurich": "ZRH",
    "geneva": "GVA", "vienna": "VIE", "copenhagen": "CPH", "stockholm": "ARN",
    "oslo": "OSL", "helsinki": "HEL", "athens": "ATH", "lisbon": "LIS",
    "porto": "OPO", "prague": "PRG", "budapest": "BUD", "warsaw": "WAW",
    "krakow": "KRK", "istanbul": "IST",
    # Japan
    "tokyo": "NRT", "osaka": "KIX", "kyoto": "KIX", "nagoya": "NGO",
    "fukuoka": "FUK", "sapporo": "CTS", "hiroshima": "HIJ",
    # China
    "beijing": "PEK", "shanghai": "PVG", "guangzhou": "CAN", "shenzhen": "SZX",
    "chengdu": "CTU", "hong kong": "HKG",
    # Southeast Asia
    "singapore": "SIN", "bangkok": "BKK", "kuala lumpur": "KUL", "manila": "MNL",
    "jakarta": "CGK", "ho chi minh": "SGN", "saigon": "SGN", "hanoi": "HAN",
    "phuket": "HKT", "bali": "DPS", "denpasar": "DPS",
    "chiang mai": "CNX", "krabi": "KBV", "pattaya": "UTP", "koh samui": "USM",
    "hat yai": "HDY",
    # South Asia
    "delhi": "DEL", "new delhi": "DEL", "mumbai": "BOM", "bombay": "BOM",
    "bangalore": "BLR", "chennai": "MAA", "hyderabad": "HYD", "kolkata": "CCU",
    "calcutta": "CCU",
    # Middle East
    "dubai": "DXB", "abu dhabi": "AUH", "doha": "DOH", "riyadh": "RUH",
    "jeddah": "JED", "tel aviv": "TLV", "jerusalem": "TLV", "amman": "AMM",
    "beirut": "BEY",
    # East Asia
    "seoul": "ICN", "taipei": "TPE", "kaohsiung": "KHH",
    # Oceania
    "sydney": "SYD", "melbourne": "MEL", "brisbane": "BNE", "perth": "PER",
    "adelaide": "ADL", "auckland": "AKL", "wellington": "WLG", "christchurch": "CHC",
    # South America
    "sao paulo": "GRU", "rio de janeiro": "GIG", "rio": "GIG", "brasilia": "BSB",
    "buenos aires": "EZE", "santiago": "SCL", "lima": "LIM", "bogota": "BOG",
    "medellin": "MDE", "cartagena": "CTG", "quito": "UIO", "guayaquil": "GYE",
    # Africa
    "johannesburg": "JNB", "cape town": "CPT", "durban": "DUR", "cairo": "CAI",
    "nairobi": "NBO", "lagos": "LOS", "accra": "ACC", "casablanca": "CMN",
    "marrakech": "RAK",
}
