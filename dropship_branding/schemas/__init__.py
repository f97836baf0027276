from dropship_branding.schemas.branding import (
    BrandingInput,
    BrandingResult,
    GenerateBrandingRequest,
    Output,
    Project,
    ProjectWithOutputs,
    RegenerateBrandingRequest,
)
from dropship_branding.schemas.marketing_plan import MarketingPlanInput, MarketingPlanResult
from dropship_branding.schemas.segments import (
    AnalyzeWebsiteRequest,
    HelixSegment,
    SegmentMatch,
    SegmentRecommendation,
)
