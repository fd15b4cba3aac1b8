"""
Curated reference tables for trend tagging.

Keywords are lowercase and match case-insensitively on word boundaries.
Entries written in ALL CAPS are acronyms and match case-sensitively, so
"ICE" (the agency) is not found in "thin ice" and "UN" is not found in
"unfair".

These tables are the static half of the reference snapshot; knowledge-base
rows from the political_entity table are merged in by
relevance.reference.load_reference_tables().
"""

POLICY_DOMAINS = [
    'Healthcare',
    'Environment',
    'Labor & Workers Rights',
    'Immigration',
    'Civil Rights',
    'Criminal Justice',
    'Voting Rights',
    'Education',
    'Housing',
    'Economic Justice',
    'Foreign Policy',
    'Technology',
]

POLICY_DOMAIN_KEYWORDS = {
    'Healthcare': [
        'medicare', 'medicaid', 'ACA', 'affordable care act', 'obamacare',
        'health insurance', 'prescription drugs', 'drug prices', 'drug pricing', 'hospital',
        'public option', 'single payer', 'universal healthcare', 'mental health',
        'abortion', 'reproductive health', 'roe v wade', 'planned parenthood',
        'nursing home', 'long term care', 'health care costs', 'uninsured',
        'pharmaceutical', 'vaccine', 'pandemic', 'public health', 'medical debt',
        'preexisting conditions', 'health coverage', 'HHS', 'FDA', 'CDC', 'NIH', 'CMS',
        'telehealth', 'opioid', 'health equity', 'rural health', 'insulin prices',
        'pharmacy benefit', 'PBM', 'nurse shortage', 'doctor shortage', 'primary care',
        'emergency room', 'maternity care', 'prenatal care', 'clinical trials',
    ],
    'Environment': [
        'climate change', 'global warming', 'renewable energy', 'solar', 'wind power',
        'fossil fuels', 'oil drilling', 'natural gas', 'pipeline', 'carbon emissions', 'EPA',
        'green new deal', 'paris agreement', 'environmental justice', 'pollution',
        'clean energy', 'electric vehicle', 'conservation', 'endangered species',
        'carbon tax', 'net zero', 'emissions', 'greenhouse gas', 'wildfire',
        'drought', 'flood', 'hurricane', 'climate crisis', 'sustainability',
        'deforestation', 'clean water', 'air quality', 'carbon capture', 'superfund',
        'clean air act', 'clean water act', 'national park', 'public lands',
        'offshore drilling', 'methane', 'biodiversity', 'PFAS', 'lead pipes',
        'toxic waste', 'sea level rise', 'wind turbine', 'battery storage', 'ev charging',
    ],
    'Labor & Workers Rights': [
        'union', 'strike', 'labor', 'workers', 'minimum wage', 'wage theft',
        'collective bargaining', 'NLRB', 'right to work', 'gig economy',
        'UAW', 'paid leave', 'sick leave', 'overtime', 'workplace safety', 'OSHA',
        'labor movement', 'unionize', 'contract negotiation', 'picket line',
        'labor dispute', 'employee rights', 'fair wages', 'department of labor', 'EEOC',
        'independent contractor', 'worker classification', 'prevailing wage',
        'apprenticeship', 'workforce development', 'paid family leave', 'parental leave',
        'non-compete', 'child labor', 'farmworker', 'domestic worker', 'union election',
        'union busting', 'unfair labor practice', 'pension', 'workers compensation',
    ],
    'Immigration': [
        'immigration', 'border', 'migrants', 'refugees', 'asylum', 'DACA',
        'dreamers', 'ICE', 'deportation', 'sanctuary city', 'visa',
        'green card', 'citizenship', 'undocumented', 'border wall',
        'immigration reform', 'path to citizenship', 'family separation',
        'CBP', 'immigration court', 'detention', 'migrant children',
        'title 42', 'work permit', 'immigration enforcement', 'USCIS',
        'naturalization', 'temporary protected status', 'TPS', 'expedited removal',
        'asylum seeker', 'unaccompanied minor', 'detention center', 'e-verify',
        'public charge', 'h-1b', 'h-2a', 'work authorization', 'border security',
        'border crossing', 'port of entry', 'removal proceedings', 'immigrant rights',
    ],
    'Civil Rights': [
        'civil rights', 'discrimination', 'equality', 'racial justice',
        'LGBTQ', 'transgender', 'gay rights', 'same sex marriage',
        'hate crime', 'affirmative action', 'DEI', 'title ix',
        'police reform', 'racial profiling', 'stop and frisk',
        'religious freedom', 'free speech', 'disability rights', 'ADA',
        'gender equality', 'title vii', 'equal protection', 'civil liberties',
        'ACLU', 'NAACP', 'americans with disabilities act', 'hate speech',
        'first amendment', 'marriage equality', 'gender identity', 'sexual orientation',
        'reparations', 'systemic racism', 'disparate impact', 'protected class',
        'age discrimination', 'equal pay', 'pay equity', 'accessibility',
        'segregation', 'civil rights act', 'fair housing act',
    ],
    'Criminal Justice': [
        'prison reform', 'mass incarceration', 'bail reform', 'police',
        'defund the police', 'qualified immunity', 'death penalty', 'sentencing',
        'parole', 'probation', 'juvenile justice', 'wrongful conviction',
        'private prison', 'solitary confinement', 'reentry', 'clemency',
        'police brutality', 'excessive force', 'body camera', 'police shooting',
        'criminal justice reform', 'recidivism', 'mandatory minimum',
        'DOJ', 'FBI', 'ATF', 'DEA', 'bureau of prisons', 'consent decree',
        'diversion program', 'restorative justice', 'expungement', 'cash bail',
        'pretrial detention', 'exoneration', 'use of force', 'no knock warrant',
        'community policing', 'drug court', 'prison conditions', 'inmates', 'county jail',
    ],
    'Voting Rights': [
        'voting rights', 'voter suppression', 'gerrymandering', 'redistricting',
        'election', 'ballot', 'mail-in voting', 'voter id', 'election integrity',
        'poll workers', 'early voting', 'voter registration', 'electoral college',
        'voting access', 'election security', 'campaign finance', 'dark money',
        'citizens united', 'election law', 'voting machines', 'absentee ballot',
        'ballot drop box', 'voter fraud', 'election fraud', 'FEC',
        'federal election commission', 'help america vote act', 'same-day registration',
        'automatic registration', 'voter roll', 'voter purge', 'provisional ballot',
        'ballot curing', 'poll watcher', 'independent redistricting', 'fair maps',
        'paper ballot', 'election interference', 'super pac', 'donor disclosure',
    ],
    'Education': [
        'education', 'schools', 'teachers', 'students', 'college', 'university',
        'student loans', 'student debt', 'charter schools', 'school choice',
        'curriculum', 'school board', 'title i', 'pell grant', 'k-12',
        'higher education', 'community college', 'vocational training',
        'school funding', 'book ban', 'critical race theory', 'sex education',
        'special education', 'teacher pay', 'school voucher', 'public schools',
        'department of education', 'head start', 'pre-k', 'early childhood education',
        'child care', 'student loan forgiveness', 'income-driven repayment',
        'legacy admission', 'college admission', 'standardized testing', 'common core',
        'teacher shortage', 'private school', 'homeschool', 'stem education', 'trade school',
    ],
    'Housing': [
        'housing', 'rent', 'affordable housing', 'homelessness', 'eviction',
        'mortgage', 'section 8', 'public housing', 'zoning', 'NIMBY', 'YIMBY',
        'housing crisis', 'rent control', 'tenant rights', 'fair housing',
        'foreclosure', 'housing voucher', 'homeless shelter', 'housing first',
        'housing discrimination', 'redlining', 'housing shortage', 'housing costs',
        'HUD', 'FHA', 'fannie mae', 'freddie mac', 'LIHTC',
        'low income housing tax credit', 'inclusionary zoning', 'rent stabilization',
        'rent increase', 'eviction moratorium', 'tenant protection',
        'first-time homebuyer', 'down payment assistance', 'manufactured housing',
        'permanent supportive housing', 'transitional housing', 'housing authority',
        'source of income discrimination', 'housing insecurity', 'landlord', 'tenants',
    ],
    'Economic Justice': [
        'economy', 'inflation', 'recession', 'jobs report', 'unemployment',
        'inequality', 'wealth gap', 'billionaire', 'tax cuts', 'corporate tax',
        'minimum wage', 'living wage', 'poverty', 'food stamps', 'SNAP',
        'child tax credit', 'wealth tax', 'income inequality', 'social security',
        'unemployment benefits', 'stimulus', 'economic relief', 'cost of living',
        'wage stagnation', 'middle class', 'federal reserve', 'interest rate',
        'CBO', 'GDP', 'supply chain', 'industrial policy', 'antitrust', 'monopoly',
        'small business', 'consumer protection', 'CFPB', 'predatory lending',
        'payday loan', 'medical debt', 'capital gains', 'estate tax', 'tax loophole',
        'tax haven',
    ],
    'Foreign Policy': [
        'foreign policy', 'diplomacy', 'sanctions', 'war', 'military',
        'ukraine', 'russia', 'china', 'israel', 'palestine', 'gaza',
        'NATO', 'UN', 'tariffs', 'treaty', 'embassy', 'arms deal', 'nuclear',
        'terrorism', 'state department', 'international relations', 'defense spending',
        'peacekeeping', 'humanitarian aid', 'ceasefire', 'peace talks', 'military aid',
        'foreign aid', 'USAID', 'security council', 'bilateral', 'multilateral',
        'ambassador', 'export control', 'embargo', 'human rights', 'arms control',
        'nuclear proliferation', 'trade agreement', 'WTO', 'iran deal', 'north korea',
        'taiwan', 'south china sea', 'middle east', 'european union', 'G7', 'G20',
    ],
    'Technology': [
        'tech', 'AI', 'artificial intelligence', 'social media', 'privacy',
        'surveillance', 'encryption', 'section 230', 'big tech', 'tiktok',
        'cybersecurity', 'net neutrality', 'broadband', 'digital divide',
        'data protection', 'algorithm', 'facial recognition', 'tech regulation',
        'content moderation', 'data breach', 'hacking', 'FTC', 'FCC', 'CISA',
        'machine learning', 'chatgpt', 'generative ai', 'deepfake', 'large language model',
        'autonomous vehicle', 'cryptocurrency', 'bitcoin', 'stablecoin', 'blockchain',
        'quantum computing', 'semiconductor', 'data broker', 'GDPR', 'app store',
        'right to repair', 'rural broadband', 'online safety', 'age verification', 'KOSA',
    ],
}

US_STATES = {
    'alabama': 'AL', 'alaska': 'AK', 'arizona': 'AZ', 'arkansas': 'AR',
    'california': 'CA', 'colorado': 'CO', 'connecticut': 'CT', 'delaware': 'DE',
    'florida': 'FL', 'georgia': 'GA', 'hawaii': 'HI', 'idaho': 'ID',
    'illinois': 'IL', 'indiana': 'IN', 'iowa': 'IA', 'kansas': 'KS',
    'kentucky': 'KY', 'louisiana': 'LA', 'maine': 'ME', 'maryland': 'MD',
    'massachusetts': 'MA', 'michigan': 'MI', 'minnesota': 'MN', 'mississippi': 'MS',
    'missouri': 'MO', 'montana': 'MT', 'nebraska': 'NE', 'nevada': 'NV',
    'new hampshire': 'NH', 'new jersey': 'NJ', 'new mexico': 'NM', 'new york': 'NY',
    'north carolina': 'NC', 'north dakota': 'ND', 'ohio': 'OH', 'oklahoma': 'OK',
    'oregon': 'OR', 'pennsylvania': 'PA', 'rhode island': 'RI', 'south carolina': 'SC',
    'south dakota': 'SD', 'tennessee': 'TN', 'texas': 'TX', 'utah': 'UT',
    'vermont': 'VT', 'virginia': 'VA', 'washington state': 'WA', 'west virginia': 'WV',
    'wisconsin': 'WI', 'wyoming': 'WY', 'district of columbia': 'DC',
    'puerto rico': 'PR', 'guam': 'GU', 'us virgin islands': 'VI',
}

# Abbreviations that are also common English words or initialisms; these
# only count in "City, XX" position.
AMBIGUOUS_STATE_CODES = {
    'AL', 'AR', 'CO', 'DE', 'HI', 'ID', 'IN', 'LA', 'MA', 'MD', 'ME',
    'MO', 'MS', 'OH', 'OK', 'OR', 'PA', 'PR', 'GU', 'VI',
}

MAJOR_CITIES = {
    'new york city': 'NY', 'nyc': 'NY', 'los angeles': 'CA', 'chicago': 'IL',
    'houston': 'TX', 'phoenix': 'AZ', 'philadelphia': 'PA', 'san antonio': 'TX',
    'san diego': 'CA', 'dallas': 'TX', 'san jose': 'CA', 'austin': 'TX',
    'jacksonville': 'FL', 'fort worth': 'TX', 'columbus': 'OH', 'charlotte': 'NC',
    'san francisco': 'CA', 'indianapolis': 'IN', 'seattle': 'WA', 'denver': 'CO',
    'boston': 'MA', 'detroit': 'MI', 'el paso': 'TX', 'atlanta': 'GA',
    'nashville': 'TN', 'memphis': 'TN', 'portland': 'OR', 'oklahoma city': 'OK',
    'las vegas': 'NV', 'louisville': 'KY', 'baltimore': 'MD', 'milwaukee': 'WI',
    'albuquerque': 'NM', 'tucson': 'AZ', 'fresno': 'CA', 'sacramento': 'CA',
    'kansas city': 'MO', 'colorado springs': 'CO', 'miami': 'FL', 'raleigh': 'NC',
    'omaha': 'NE', 'long beach': 'CA', 'virginia beach': 'VA', 'oakland': 'CA',
    'minneapolis': 'MN', 'tulsa': 'OK', 'new orleans': 'LA', 'wichita': 'KS',
    'cleveland': 'OH', 'tampa': 'FL', 'bakersfield': 'CA', 'honolulu': 'HI',
    'st louis': 'MO', 'st. louis': 'MO', 'pittsburgh': 'PA', 'saint paul': 'MN',
    'st paul': 'MN', 'anchorage': 'AK', 'cincinnati': 'OH', 'newark': 'NJ',
    'orlando': 'FL', 'washington dc': 'DC', 'washington d.c.': 'DC',
}

INTERNATIONAL_LOCATIONS = [
    'ukraine', 'russia', 'china', 'israel', 'palestine', 'gaza', 'iran',
    'north korea', 'taiwan', 'mexico', 'canada', 'united kingdom', 'france',
    'germany', 'japan', 'india', 'brazil', 'saudi arabia', 'syria', 'afghanistan',
    'iraq', 'yemen', 'venezuela', 'cuba', 'south korea', 'australia',
    'european union', 'NATO', 'UN', 'united nations',
]

# (canonical_name, entity_type, aliases)
WELL_KNOWN_ENTITIES = [
    # Administration and congressional leadership
    ('Joe Biden', 'politician', ['biden', 'president biden']),
    ('Kamala Harris', 'politician', ['vice president harris', 'kamala']),
    ('Donald Trump', 'politician', ['trump', 'president trump']),
    ('Barack Obama', 'politician', ['obama']),
    ('Chuck Schumer', 'politician', ['schumer']),
    ('Mitch McConnell', 'politician', ['mcconnell']),
    ('Mike Johnson', 'politician', ['speaker johnson']),
    ('Hakeem Jeffries', 'politician', ['jeffries']),
    ('Bernie Sanders', 'politician', ['senator sanders', 'bernie']),
    ('Elizabeth Warren', 'politician', ['senator warren']),
    ('Ted Cruz', 'politician', ['senator cruz']),
    ('Marco Rubio', 'politician', ['rubio']),
    ('Alexandria Ocasio-Cortez', 'politician', ['AOC', 'ocasio-cortez']),
    ('Marjorie Taylor Greene', 'politician', ['MTG', 'representative greene']),

    # Supreme Court
    ('John Roberts', 'politician', ['chief justice roberts']),
    ('Clarence Thomas', 'politician', ['justice thomas']),
    ('Samuel Alito', 'politician', ['justice alito', 'alito']),
    ('Sonia Sotomayor', 'politician', ['justice sotomayor', 'sotomayor']),
    ('Elena Kagan', 'politician', ['justice kagan']),
    ('Neil Gorsuch', 'politician', ['justice gorsuch', 'gorsuch']),
    ('Brett Kavanaugh', 'politician', ['justice kavanaugh', 'kavanaugh']),
    ('Amy Coney Barrett', 'politician', ['justice barrett', 'ACB']),
    ('Ketanji Brown Jackson', 'politician', ['justice jackson', 'KBJ']),

    # Advocacy organizations
    ('ACLU', 'organization', ['american civil liberties union']),
    ('NAACP', 'organization', ['national association for the advancement of colored people']),
    ('Planned Parenthood', 'organization', []),
    ('NRA', 'organization', ['national rifle association']),
    ('AFL-CIO', 'organization', []),
    ('AARP', 'organization', []),
    ('Sierra Club', 'organization', []),
    ('Greenpeace', 'organization', []),
    ('Human Rights Campaign', 'organization', []),
    ('Heritage Foundation', 'organization', []),
    ('Brookings Institution', 'organization', ['brookings']),

    # Agencies
    ('Department of Justice', 'agency', ['DOJ', 'justice department']),
    ('Department of Homeland Security', 'agency', ['DHS', 'homeland security']),
    ('Department of Education', 'agency', ['education department']),
    ('Department of Health and Human Services', 'agency', ['HHS']),
    ('Department of Housing and Urban Development', 'agency', ['HUD']),
    ('Department of Labor', 'agency', ['labor department']),
    ('Department of Defense', 'agency', ['DOD', 'pentagon']),
    ('State Department', 'agency', ['department of state']),
    ('Environmental Protection Agency', 'agency', ['EPA']),
    ('Federal Bureau of Investigation', 'agency', ['FBI']),
    ('Immigration and Customs Enforcement', 'agency', ['ICE']),
    ('Customs and Border Protection', 'agency', ['CBP', 'border patrol']),
    ('Federal Trade Commission', 'agency', ['FTC']),
    ('Securities and Exchange Commission', 'agency', ['SEC']),
    ('National Labor Relations Board', 'agency', ['NLRB']),
    ('Food and Drug Administration', 'agency', ['FDA']),
    ('Centers for Disease Control and Prevention', 'agency', ['CDC']),
    ('Federal Communications Commission', 'agency', ['FCC']),
    ('Federal Reserve', 'agency', ['the fed']),
    ('Consumer Financial Protection Bureau', 'agency', ['CFPB']),
    ('Federal Emergency Management Agency', 'agency', ['FEMA']),

    # Legislation
    ('Affordable Care Act', 'legislation', ['ACA', 'obamacare']),
    ('Inflation Reduction Act', 'legislation', ['IRA climate law']),
    ('Voting Rights Act', 'legislation', []),
    ('John Lewis Voting Rights Advancement Act', 'legislation', ['john lewis act']),
    ('Civil Rights Act', 'legislation', []),
    ('Clean Air Act', 'legislation', []),
    ('Clean Water Act', 'legislation', []),
    ('Endangered Species Act', 'legislation', []),
    ('Americans with Disabilities Act', 'legislation', ['ADA']),
    ('CHIPS and Science Act', 'legislation', ['CHIPS act']),
    ('PRO Act', 'legislation', ['protecting the right to organize act']),
    ('Equality Act', 'legislation', []),
    ('Fair Housing Act', 'legislation', []),
    ('Section 230', 'legislation', ['communications decency act']),
]
